"""
Pydantic models for the identification endpoints.

The identify request itself is multipart form data and is validated in
the route.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ProviderConfigRequest(BaseModel):
    """Request model for configuring a provider at runtime."""
    provider: str = Field(..., min_length=1, description="Provider key, e.g. 'openai'")
    api_key: str = Field(..., min_length=1, description="API key for the provider")


class ProviderSelectRequest(BaseModel):
    provider: str = Field(..., min_length=1, description="Provider key")


class ProvidersResponse(BaseModel):
    providers: List[str] = Field(..., description="Configured provider keys")
    current: str = Field(..., description="Active provider key")
    supported: List[str] = Field(..., description="All known provider keys")


class ProviderConfigResponse(BaseModel):
    success: bool
    message: str
    provider: Optional[str] = None
