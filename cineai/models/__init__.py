"""
Pydantic models for request/response validation.
"""

from .user import (
    UserRegister,
    UserLogin,
    UserResponse,
    UserListResponse,
    PasswordChange,
    Preferences,
    PreferencesUpdate,
    ProfileUpdate,
    TokenResponse,
    RefreshTokenRequest
)

from .identification import (
    ProviderConfigRequest,
    ProviderConfigResponse,
    ProviderSelectRequest,
    ProvidersResponse
)

from .movie import (
    CatalogStats,
    MovieListResponse,
    MovieResponse,
    PlatformResponse,
    YearRange
)

__all__ = [
    # User models
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "UserListResponse",
    "PasswordChange",
    "Preferences",
    "PreferencesUpdate",
    "ProfileUpdate",
    "TokenResponse",
    "RefreshTokenRequest",

    # Identification models
    "ProviderConfigRequest",
    "ProviderConfigResponse",
    "ProviderSelectRequest",
    "ProvidersResponse",

    # Movie models
    "CatalogStats",
    "MovieListResponse",
    "MovieResponse",
    "PlatformResponse",
    "YearRange"
]
