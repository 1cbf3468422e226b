"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_CORS_ORIGINS = [
    "http://localhost:4200",
    "http://127.0.0.1:4200",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Tax tables
    default_tax_year: int = 2025
    """Tax year used when a caller does not name one."""

    # NoDecode prevents pydantic-settings from forcing JSON parsing at the
    # env-source layer, so we can accept either JSON arrays or CSV strings.
    cors_origins: Annotated[list[str], NoDecode] = DEFAULT_CORS_ORIGINS
    """Origins allowed to call the estimate API from a browser."""

    @field_validator("default_tax_year")
    @classmethod
    def validate_default_tax_year(cls, value: int) -> int:
        """Reject a default year that has no reference tables."""
        from fedtax.tax.year_config import TAX_YEAR_CONFIGS

        if value not in TAX_YEAR_CONFIGS:
            available = sorted(TAX_YEAR_CONFIGS.keys())
            raise ValueError(
                f"DEFAULT_TAX_YEAR must be one of {available}, got {value}."
            )
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Parse CORS origins from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_CORS_ORIGINS.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_origins(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None:
                raise ValueError(
                    "CORS_ORIGINS must be a JSON array or comma-separated string."
                )

            # Fallback: comma-separated values
            parsed = [item.strip() for item in text.split(",")]
            return _normalize_origins(parsed)

        if isinstance(value, (list, tuple, set)):
            return _normalize_origins(value)

        raise ValueError("CORS_ORIGINS must be a string, list, tuple, or set.")


def _normalize_origins(values: Iterable[object]) -> list[str]:
    """Normalize and dedupe origins while preserving declaration order."""
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"').rstrip("/")
        if not item:
            continue
        if item in seen:
            continue
        normalized.append(item)
        seen.add(item)

    if not normalized:
        return DEFAULT_CORS_ORIGINS.copy()
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Ensure DEFAULT_TAX_YEAR names a year with reference tables.",
        "Allowed values for CORS_ORIGINS are:",
        '  1) ["http://localhost:4200","http://127.0.0.1:4200"]',
        "  2) http://localhost:4200,http://127.0.0.1:4200",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
