"""
Utility modules for CineAI.
"""

from .audit_log import AuditLogger, log_auth_event, log_authorization_failure, log_sensitive_operation
from .images import InvalidImageError, prepare_image

__all__ = [
    "AuditLogger",
    "log_auth_event",
    "log_authorization_failure",
    "log_sensitive_operation",
    "InvalidImageError",
    "prepare_image"
]
