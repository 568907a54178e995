"""
Application settings.

Read once from the environment at startup and passed to the collaborators
that need them.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Configuration for the CineAI service."""
    provider_keys: Dict[str, str] = field(default_factory=dict)
    default_provider: str = "openai"
    google_search_api_key: Optional[str] = None
    google_search_engine_id: Optional[str] = None
    data_dir: str = "./data"
    max_upload_bytes: int = 10 * 1024 * 1024
    rate_limit_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        provider_keys = {}
        for provider_key, env_name in (
            ("openai", "OPENAI_API_KEY"),
            ("gemini", "GEMINI_API_KEY"),
            ("claude", "ANTHROPIC_API_KEY"),
        ):
            value = os.getenv(env_name)
            if value:
                provider_keys[provider_key] = value

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            provider_keys=provider_keys,
            default_provider=os.getenv("AI_DEFAULT_PROVIDER", "openai").lower(),
            google_search_api_key=os.getenv("GOOGLE_SEARCH_API_KEY") or None,
            google_search_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID") or None,
            data_dir=os.getenv("DATA_DIR", "./data"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", "true"),
            cors_origins=origins or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
