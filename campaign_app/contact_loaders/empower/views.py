"""
Empower provisioning endpoints.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, make_response, request

from campaign_app.contact_loaders.metrics import record_provisioning_request
from campaign_app.models import db

from .auth0 import Auth0ManagementClient
from .service import (
    Created,
    ProvisioningConfig,
    ProvisioningError,
    ProvisioningService,
    UpstreamFailure,
)

EMPOWER_EXTENSION_KEY = "empower"

empower_blueprint = Blueprint("empower", __name__, url_prefix="/integration/empower")


def get_provisioning_service() -> ProvisioningService:
    """Build a service bound to the current app's configuration and shared HTTP session."""

    config = ProvisioningConfig.from_mapping(current_app.config)
    state = current_app.extensions.get(EMPOWER_EXTENSION_KEY, {})
    identity_client = Auth0ManagementClient(
        domain=config.auth0_domain,
        client_id=config.client_id,
        client_secret=config.client_secret,
        session=state.get("http_session"),
        timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS"),
        logger=current_app.logger,
    )
    return ProvisioningService(config, identity_client=identity_client)


def _request_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _error_response(endpoint: str, error: ProvisioningError):
    if isinstance(error, UpstreamFailure):
        record_provisioning_request(endpoint, "upstream_error")
        response = make_response(error.body, error.status_code)
        response.mimetype = "text/plain"
        if error.content_type:
            response.headers["Content-Type"] = error.content_type
        return response
    outcome = "unauthorized" if error.status_code == 401 else "invalid"
    record_provisioning_request(endpoint, outcome)
    current_app.logger.warning(f"Empower {endpoint} request rejected: {error.message}")
    return jsonify({"message": error.message}), error.status_code


def _internal_error(endpoint: str):
    db.session.rollback()
    record_provisioning_request(endpoint, "error")
    current_app.logger.error(f"Error handling Empower {endpoint} request", exc_info=True)
    return jsonify({"message": "An unexpected error occurred."}), 500


@empower_blueprint.post("/create/organization")
def create_organization():
    """Create an organization mirrored from Empower."""
    payload = _request_payload()
    service = get_provisioning_service()
    try:
        service.authenticate_request(payload)
        service.validate_organization(payload)
        organization = service.create_organization(payload)
    except ProvisioningError as error:
        return _error_response("organization", error)
    except Exception:
        return _internal_error("organization")

    record_provisioning_request("organization", "ok")
    return jsonify(organization.to_dict()), 200


@empower_blueprint.post("/create/user")
def create_user():
    """Create or update a user mirrored from Empower and attach it to an organization."""
    payload = _request_payload()
    service = get_provisioning_service()
    try:
        service.authenticate_request(payload)
        service.validate_user(payload)
        result = service.create_user(payload)
    except ProvisioningError as error:
        return _error_response("user", error)
    except Exception:
        return _internal_error("user")

    record_provisioning_request("user", "created" if isinstance(result, Created) else "updated")
    current_app.logger.info(
        f"Empower user {'created' if isinstance(result, Created) else 'updated'}: {result.user.id}"
    )
    return jsonify(result.user.to_dict()), 200
