"""
Identification routes.

Provides endpoints for:
- Identifying a movie or series from text, a screenshot, a clip or an actor name
- Listing, configuring and selecting AI providers
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from cineai.auth import get_current_user, get_current_user_optional, get_database
from cineai.models.identification import (
    ProviderConfigRequest,
    ProviderConfigResponse,
    ProviderSelectRequest,
    ProvidersResponse
)
from cineai.providers import IdentificationRequest, IdentificationResponse, ProviderNotAvailableError, SearchKind
from cineai.services import IdentificationService, WebSearchService
from cineai.storage import Database
from cineai.utils.audit_log import log_sensitive_operation
from cineai.utils.images import InvalidImageError, prepare_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI Identification"])

MAX_QUERY_LENGTH = 200
UPLOAD_CHUNK_SIZE = 1024 * 1024


def get_identification_service(request: Request) -> IdentificationService:
    return request.app.state.identification


def get_web_search(request: Request) -> WebSearchService:
    return request.app.state.web_search


def _parse_kind(value: str) -> SearchKind:
    try:
        return SearchKind((value or "").strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search type must be one of: text, image, video, actor"
        )


def _clean_query(query: Optional[str]) -> Optional[str]:
    if query is None:
        return None
    query = query.strip()
    if not 1 <= len(query) <= MAX_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query must be between 1 and {MAX_QUERY_LENGTH} characters"
        )
    return query


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read an upload in chunks, failing as soon as it exceeds max_bytes."""
    chunks = []
    size = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _record_results(db: Database, user: Optional[dict], kind: SearchKind, query: Optional[str],
                    response: IdentificationResponse) -> None:
    """Store search history for signed-in users and add identified titles to the catalog."""
    if not response.success:
        return

    if user:
        db.add_search_history({
            "user_id": user["id"],
            "type": kind.value,
            "query": query or "File upload",
            "results_count": len(response.items),
            "confidence": response.confidence,
            "processing_time_ms": response.processing_time_ms,
            "provider": response.provider,
        })

    for item in response.items:
        # The degraded placeholder is not a real title
        if item.degraded:
            continue
        movie = item.to_dict()
        movie.pop("confidence", None)
        movie.pop("degraded", None)
        db.add_movie(movie)


@router.post("/identify")
async def identify(
    request: Request,
    type: str = Form(..., description="text, image, video or actor"),
    query: Optional[str] = Form(None, description="Description or actor name"),
    file: Optional[UploadFile] = File(None, description="Screenshot or clip"),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    service: IdentificationService = Depends(get_identification_service),
    web_search: WebSearchService = Depends(get_web_search),
    db: Database = Depends(get_database)
):
    """
    Identify a movie or series.

    Text and actor searches need a query; image and video searches need an
    uploaded file. The response always has HTTP status 200 once the input
    is valid: check success, source and status for the outcome.
    """
    kind = _parse_kind(type)
    query = _clean_query(query)

    if kind in (SearchKind.TEXT, SearchKind.ACTOR) and not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A query is required for text and actor searches"
        )

    content = query
    mime_type = None

    if kind in (SearchKind.IMAGE, SearchKind.VIDEO):
        if file is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A file upload is required for image and video searches"
            )

        content_type = (file.content_type or "").lower()
        if not content_type.startswith(f"{kind.value}/"):
            raise HTTPException(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                detail=f"Expected a file of type {kind.value}/*"
            )

        data = await _read_upload(file, request.app.state.settings.max_upload_bytes)
        if not data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty"
            )

        if kind == SearchKind.IMAGE:
            try:
                data, content_type = await run_in_threadpool(prepare_image, data)
            except InvalidImageError as e:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=str(e)
                )

        content = data
        mime_type = content_type

    identification_request = IdentificationRequest(kind=kind, content=content, query=query, mime_type=mime_type)
    response = await run_in_threadpool(service.identify, identification_request)

    _record_results(db, current_user, kind, query, response)

    web_results = []
    if query and web_search.is_configured():
        web_results = [r.to_dict() for r in await run_in_threadpool(web_search.search_movies, query)]

    body = response.to_dict()
    body["provider"] = response.provider or service.current_provider
    body["availability_is_synthetic"] = True
    body["web_results"] = web_results
    return body


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(service: IdentificationService = Depends(get_identification_service)):
    """
    List configured providers, the active one and every supported key.
    """
    return ProvidersResponse(
        providers=service.available_providers(),
        current=service.current_provider,
        supported=service.supported_providers
    )


@router.post("/config", response_model=ProviderConfigResponse)
async def configure_provider(
    config: ProviderConfigRequest,
    request: Request,
    current_user: dict = Depends(get_current_user),
    service: IdentificationService = Depends(get_identification_service)
):
    """
    Configure a provider with an API key and make it the active one.
    """
    provider_key = config.provider.strip().lower()

    if provider_key not in service.supported_providers:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown provider '{provider_key}'. Available: {', '.join(service.supported_providers)}"
        )

    if not service.configure(provider_key, config.api_key):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid API key for this provider"
        )

    service.select_active(provider_key)

    log_sensitive_operation(
        operation="provider_configure",
        user_id=current_user["id"],
        email=current_user["email"],
        request=request,
        details=f"provider={provider_key}"
    )

    return ProviderConfigResponse(
        success=True,
        message="AI configuration updated successfully",
        provider=service.current_provider
    )


@router.put("/provider", response_model=ProvidersResponse)
async def select_provider(
    selection: ProviderSelectRequest,
    request: Request,
    current_user: dict = Depends(get_current_user),
    service: IdentificationService = Depends(get_identification_service)
):
    """
    Switch the active provider to one that is already configured.
    """
    try:
        service.select_active(selection.provider)
    except ProviderNotAvailableError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    log_sensitive_operation(
        operation="provider_select",
        user_id=current_user["id"],
        email=current_user["email"],
        request=request,
        details=f"provider={service.current_provider}"
    )

    return ProvidersResponse(
        providers=service.available_providers(),
        current=service.current_provider,
        supported=service.supported_providers
    )
