"""Application settings.

Defaults suit local development; every field can be overridden from the
environment through ``Settings.from_env``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)

MEMORY_DATABASE = ":memory:"


@dataclass(frozen=True)
class Settings:
    database_path: str = "sipcalc.db"
    cors_origins: Tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)

    # saved calculations beyond this are evicted, oldest first
    history_limit: int = 50
    default_currency: str = "INR"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        origins = env.get("SIPCALC_CORS_ORIGINS")
        cors_origins = (
            tuple(origin.strip() for origin in origins.split(",") if origin.strip())
            if origins
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            database_path=env.get("SIPCALC_DATABASE", cls.database_path),
            cors_origins=cors_origins,
            history_limit=int(env.get("SIPCALC_HISTORY_LIMIT", cls.history_limit)),
            default_currency=env.get("SIPCALC_DEFAULT_CURRENCY", cls.default_currency),
            log_level=env.get("SIPCALC_LOG_LEVEL", cls.log_level).upper(),
            log_file=env.get("SIPCALC_LOG_FILE") or None,
        )
