"""
Audit logging for security-sensitive operations.

Account events (register, login, logout, token refresh), authorization
failures and sensitive operations such as password changes or provider
reconfiguration go to the dedicated "audit" logger. Secrets (passwords,
tokens, provider API keys) are never part of a message.
"""

import logging
from typing import Optional
from fastapi import Request

audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)

if not audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - AUDIT - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    audit_logger.addHandler(handler)


class AuditLogger:
    """Formats audit records and writes them to the audit logger."""

    @staticmethod
    def client_ip(request: Optional[Request]) -> str:
        """Client IP, honoring X-Forwarded-For when behind a proxy."""
        if not request:
            return "unknown"

        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        return request.client.host if request.client else "unknown"

    @staticmethod
    def log_auth_event(
        event_type: str,
        user_id: Optional[str],
        email: Optional[str],
        success: bool,
        request: Optional[Request] = None,
        details: Optional[str] = None
    ):
        """
        Log an account event.

        Args:
            event_type: register, login, logout or token_refresh
            user_id: User ID if known
            email: Email the caller presented
            success: Whether the operation succeeded
            request: Request the event came from
            details: Free-form reason, e.g. "Invalid password"
        """
        outcome = "SUCCESS" if success else "FAILURE"
        message = (
            f"AUTH_EVENT | {event_type.upper()} | {outcome} | "
            f"user_id={user_id or 'N/A'} | email={email or 'N/A'} | "
            f"ip={AuditLogger.client_ip(request)}"
        )
        if details:
            message += f" | details={details}"

        if success:
            audit_logger.info(message)
        else:
            audit_logger.warning(message)

    @staticmethod
    def log_authorization_failure(
        user_id: str,
        email: Optional[str],
        role: Optional[str],
        resource_type: str,
        resource_id: str,
        action: str,
        request: Optional[Request] = None,
        reason: Optional[str] = None
    ):
        """Log a request rejected with 403."""
        message = (
            f"AUTHZ_FAILURE | user_id={user_id} | email={email} | role={role} | "
            f"resource={resource_type}:{resource_id} | action={action} | "
            f"ip={AuditLogger.client_ip(request)}"
        )
        if reason:
            message += f" | reason={reason}"

        audit_logger.warning(message)

    @staticmethod
    def log_sensitive_operation(
        operation: str,
        user_id: str,
        email: Optional[str],
        request: Optional[Request] = None,
        details: Optional[str] = None
    ):
        """
        Log a sensitive operation.

        Args:
            operation: password_change, provider_configure, provider_select, ...
            user_id: User performing the operation
            email: That user's email
            request: Request the operation came from
            details: Extra context such as the provider key
        """
        message = (
            f"SENSITIVE_OP | {operation.upper()} | user_id={user_id} | "
            f"email={email} | ip={AuditLogger.client_ip(request)}"
        )
        if details:
            message += f" | details={details}"

        audit_logger.info(message)


def log_auth_event(
    event_type: str,
    user_id: Optional[str],
    email: Optional[str],
    success: bool,
    request: Optional[Request] = None,
    details: Optional[str] = None
):
    AuditLogger.log_auth_event(event_type, user_id, email, success, request, details)


def log_authorization_failure(
    user_id: str,
    email: Optional[str],
    role: Optional[str],
    resource_type: str,
    resource_id: str,
    action: str,
    request: Optional[Request] = None,
    reason: Optional[str] = None
):
    AuditLogger.log_authorization_failure(
        user_id, email, role, resource_type, resource_id, action, request, reason
    )


def log_sensitive_operation(
    operation: str,
    user_id: str,
    email: Optional[str],
    request: Optional[Request] = None,
    details: Optional[str] = None
):
    AuditLogger.log_sensitive_operation(operation, user_id, email, request, details)
