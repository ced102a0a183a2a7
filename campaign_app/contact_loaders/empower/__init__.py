"""Empower integration: organizations and users are pushed in over HTTP, never uploaded."""

from __future__ import annotations

from campaign_app.contact_loaders.registry import LoaderAvailability

from .service import (
    AuthenticationFailure,
    Created,
    ProvisioningConfig,
    ProvisioningService,
    UpstreamFailure,
    Updated,
    ValidationFailure,
)
from .views import EMPOWER_EXTENSION_KEY, empower_blueprint

name = "empower"

__all__ = [
    "AuthenticationFailure",
    "Created",
    "ProvisioningConfig",
    "ProvisioningService",
    "UpstreamFailure",
    "Updated",
    "ValidationFailure",
    "EMPOWER_EXTENSION_KEY",
    "empower_blueprint",
    "available",
    "get_client_choice_data",
]


def available(config) -> LoaderAvailability:
    # There is no front-end ingestion for this loader.
    return LoaderAvailability(result=False, expires_seconds=86400)


def get_client_choice_data() -> dict[str, object]:
    """Nothing is handed to the campaign admin client for this loader."""

    return {"data": "", "expiresSeconds": 0}
