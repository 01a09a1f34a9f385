"""Environment-driven base settings for taskline.

``TasklineSettings`` holds the process-wide defaults that the global
:class:`~taskline.core.configuration.Configuration` is seeded from. Each
value can be overridden with a ``TASKLINE_`` prefixed environment variable
or a ``.env`` file.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not runtime
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box for development

Examples:
    >>> import os
    >>> os.environ["TASKLINE_TASK_HALT"] = '["failed", "skipped"]'
    >>> TasklineSettings().task_halt
    ['failed', 'skipped']

Tags:
    settings, configuration, pydantic, environment, taskline

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class TasklineSettings(BaseSettings):
    """Process defaults for task execution.

    Fields
    ──────
    log_level     : Structlog log level
    json_logs     : Render logs as JSON (None = auto-detect from tty)
    task_halt     : Statuses that make ``call_or_raise`` re-raise
    workflow_halt : Statuses that abort a workflow group
    retries       : Default retry budget for unexpected exceptions
    retry_delay   : Seconds of sleep per retry already spent
    backtrace     : Log the originating exception's traceback on failure
    skip_freezing : Leave finalized objects mutable (test doubles)
    locale        : Locale file used for default messages
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
    backtrace: bool = False

    # ── Halt policy ──────────────────────────────────────────────
    task_halt: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["failed"])
    workflow_halt: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["failed"]
    )

    # ── Retry ────────────────────────────────────────────────────
    retries: int = Field(default=0, ge=0)
    retry_delay: float = Field(default=0.0, ge=0.0)

    # ── Finalization ─────────────────────────────────────────────
    skip_freezing: bool = False

    # ── Messages ─────────────────────────────────────────────────
    locale: str = "en"

    @field_validator("task_halt", "workflow_halt", mode="before")
    @classmethod
    def _normalize_statuses(cls, value: object) -> object:
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return [part.strip() for part in value.split(",") if part.strip()]
        return value
