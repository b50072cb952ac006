"""
Cross-origin access for a front-end served from another origin.

Development accepts any origin. Elsewhere only the origins listed in
``CORS_ALLOWED_ORIGINS`` (comma separated) may call the API.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging import REQUEST_ID_HEADER


@dataclass
class CORSConfig:
    """Origins allowed to call the API."""

    origins: List[str] = field(default_factory=list)
    any_origin: bool = False
    preflight_max_age: int = 600


def _origins_from_env() -> List[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_cors_config(environment: Optional[str] = None) -> CORSConfig:
    """CORS policy for ``environment`` (defaults to BOOKTRACKER_ENV)."""
    if environment is None:
        environment = os.getenv("BOOKTRACKER_ENV", "development")

    return CORSConfig(
        origins=_origins_from_env(),
        any_origin=environment == "development",
    )


def setup_cors(app: FastAPI, config: Optional[CORSConfig] = None) -> None:
    """
    Add CORSMiddleware for the book API.

    Bearer tokens travel in the Authorization header, never in cookies, so
    credentialed requests are not enabled.
    """
    if config is None:
        config = get_cors_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.any_origin else config.origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=config.preflight_max_age,
    )
