"""
Contact loader extensions.

Resolves the configured loaders, registers their blueprints and CLI commands,
and records per-loader metadata on the Flask app for the health endpoint.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

import requests
from flask import Flask

from .cli import contacts_cli
from .registry import LoaderAvailability, LoaderDescriptor, get_loader_registry, resolve_loaders

CONTACT_LOADERS_EXTENSION_KEY = "contact_loaders"

__all__ = [
    "init_contact_loaders",
    "CONTACT_LOADERS_EXTENSION_KEY",
    "LoaderAvailability",
    "LoaderDescriptor",
    "get_loader_registry",
    "resolve_loaders",
]


def _describe_loader(app: Flask, descriptor: LoaderDescriptor, module) -> dict[str, Any]:
    availability: LoaderAvailability = module.available(app.config)
    return {
        "name": descriptor.name,
        "display_name": descriptor.display_name,
        "instructions": descriptor.server_administrator_instructions(),
        "available": availability.as_dict(),
    }


def init_contact_loaders(app: Flask) -> dict[str, Any]:
    """
    Wire the configured contact loaders into ``app``.

    Safe to call more than once; blueprints are only registered the first time.
    """
    state = app.extensions.setdefault(
        CONTACT_LOADERS_EXTENSION_KEY,
        {"configured": (), "loaders": ()},
    )
    configured = tuple(app.config.get("CONTACT_LOADERS", ()))
    descriptors = resolve_loaders(configured)

    loaders = []
    for descriptor in descriptors:
        module = import_module(descriptor.module)
        loaders.append(_describe_loader(app, descriptor, module))
        if descriptor.blueprint is None:
            continue
        blueprint = getattr(module, descriptor.blueprint)
        if blueprint.name not in app.blueprints:
            app.register_blueprint(blueprint)
            # One outbound session per loader, reused across requests.
            app.extensions.setdefault(blueprint.name, {"http_session": requests.Session()})

    if contacts_cli.name not in app.cli.commands:
        app.cli.add_command(contacts_cli)

    state["configured"] = configured
    state["loaders"] = tuple(loaders)
    app.logger.info(f"Contact loaders enabled: {', '.join(configured) or 'none'}")
    return state
