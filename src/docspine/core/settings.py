"""Settings for docspine CRUD services and drivers.

Every CRUD service shares the same handful of knobs: the service-level name
of the identity field, paging limits, and the delay of the connect retry
loop.  ``DocSpineSettings`` declares them once, reads overrides from
``DOCSPINE_*`` environment variables or a ``.env`` file, and validates them
at construction time.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-request
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** ``_id`` identity field, 1 second retry delay

Examples:
    >>> from docspine.core.settings import DocSpineSettings
    >>> settings = DocSpineSettings(id_field="uuid")
    >>> settings.reconnect_delay_seconds
    1.0

Tags:
    settings, configuration, pydantic, environment, docspine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocSpineSettings(BaseSettings):
    """Settings of a single CRUD service instance.

    Fields
    ──────
    id_field                : Service-level name of the identity field
    page_size               : Default page size of ``list`` (reserved)
    max_page_size           : Maximum page size of ``list`` (reserved)
    max_limit               : Maximum ``limit`` of ``find``; -1 means none (reserved)
    reconnect_delay_seconds : Fixed delay between connect attempts at startup
    log_level               : Structlog log level
    json_logs               : Force JSON (True) / console (False) logs; None = auto
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Entities ─────────────────────────────────────────────────
    id_field: str = Field(default="_id", min_length=1)

    # ── Paging ───────────────────────────────────────────────────
    page_size: int = Field(default=10, gt=0)
    max_page_size: int = Field(default=100, gt=0)
    max_limit: int = -1

    # ── Connection ───────────────────────────────────────────────
    reconnect_delay_seconds: float = Field(default=1.0, ge=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


class FirestoreSettings(BaseSettings):
    """Credentials of the Cloud Firestore driver.

    Both are optional here so that a missing value surfaces as the driver's
    own ``MissingApiKeyError`` / ``MissingProjectIdError`` at ``init`` time.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSPINE_FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = None
    project_id: str | None = None
