"""
Contact loader registry.

Loaders register metadata here so configuration can be validated before any
loader module (and its third-party dependencies) is imported.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class LoaderAvailability:
    """Whether a loader can be used from the campaign admin, and how long that answer stays valid."""

    result: bool
    expires_seconds: int

    def as_dict(self) -> dict[str, object]:
        return {"result": self.result, "expiresSeconds": self.expires_seconds}


@dataclass(frozen=True)
class LoaderDescriptor:
    """Metadata describing a contact loader."""

    name: str
    display_name: str
    description: str
    setup_instructions: str | None = None
    environment_variables: Tuple[str, ...] = ()
    module: str | None = None
    blueprint: str | None = None  # attribute on ``module`` holding a Flask blueprint

    def server_administrator_instructions(self) -> dict[str, object]:
        payload: dict[str, object] = {"description": self.description}
        if self.setup_instructions:
            payload["setupInstructions"] = self.setup_instructions
        if self.environment_variables:
            payload["environmentVariables"] = list(self.environment_variables)
        return payload


def get_loader_registry() -> Mapping[str, LoaderDescriptor]:
    """Return the registry of supported contact loaders."""
    return OrderedDict(
        (
            (
                "csv-s3-upload",
                LoaderDescriptor(
                    name="csv-s3-upload",
                    display_name="CSV Upload (direct to storage)",
                    description="Upload a CSV of contacts straight to object storage with a pre-signed URL.",
                    module="campaign_app.contact_loaders.csv_s3_upload",
                ),
            ),
            (
                "empower",
                LoaderDescriptor(
                    name="empower",
                    display_name="Empower Project",
                    description="Load orgs/contacts from Empower",
                    setup_instructions=(
                        "Set up an Auth0 Management API and set the environment variables specified."
                    ),
                    environment_variables=(
                        "AUTH0_DOMAIN",
                        "AUTH0_MANAGEMENT_API_CLIENT_ID",
                        "AUTH0_MANAGEMENT_API_CLIENT_SECRET",
                        "EMPOWER_SHARED_SECRET",
                    ),
                    module="campaign_app.contact_loaders.empower",
                    blueprint="empower_blueprint",
                ),
            ),
        )
    )


def resolve_loaders(
    configured: Sequence[str],
    registry: Mapping[str, LoaderDescriptor] | None = None,
) -> Iterable[LoaderDescriptor]:
    """
    Map configured loader names to registry descriptors, raising on unknowns.
    """
    registry = registry or get_loader_registry()
    unknown = sorted({loader for loader in configured if loader not in registry})
    if unknown:
        raise ValueError(
            "Unknown contact loaders configured: "
            + ", ".join(unknown)
            + ". Update CONTACT_LOADERS or register these loaders first."
        )
    return tuple(registry[loader] for loader in configured)
