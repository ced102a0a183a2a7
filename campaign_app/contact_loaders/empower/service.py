"""
Organization and user provisioning for the Empower integration.

Empower calls two endpoints with a shared secret to mirror its organizations
and users into this platform. New users also get a passwordless Auth0 account.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError

from campaign_app.models import Organization, User, UserOrganization, db

from .auth0 import Auth0Error, Auth0ManagementClient

SHARED_SECRET_FIELD = "empower_shared_secret"

ORGANIZATION_ATTRIBUTES: Tuple[str, ...] = ("name",)
USER_ATTRIBUTES: Tuple[str, ...] = (
    "email",
    "first_name",
    "last_name",
    "cell",
    "organization_id",
    "role",
    "is_superadmin",
)

INVALID_SHARED_SECRET_MESSAGE = "Invalid shared secret"
ORGANIZATION_ATTRIBUTES_MISSING_MESSAGE = "Organization attributes missing."
USER_ATTRIBUTES_MISSING_MESSAGE = "User attributes missing."
INVALID_ORGANIZATION_ID_MESSAGE = "organization_id must be an integer."
INVALID_ROLE_MESSAGE = "role must be a non-empty string."

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    """Base error carrying the HTTP status the endpoint should answer with."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationFailure(ProvisioningError):
    status_code = 401

    def __init__(self, message: str = INVALID_SHARED_SECRET_MESSAGE) -> None:
        super().__init__(message)


class ValidationFailure(ProvisioningError):
    status_code = 400


class UpstreamFailure(ProvisioningError):
    """The identity provider refused the request; its response is relayed verbatim."""

    def __init__(self, *, status_code: int, body: str, content_type: str | None = None) -> None:
        super().__init__(f"Identity provider responded with status {status_code}")
        self.status_code = status_code
        self.body = body
        self.content_type = content_type


@dataclass(frozen=True)
class ProvisioningConfig:
    """Settings the provisioning service needs, injected at construction."""

    auth0_domain: str | None
    client_id: str | None
    client_secret: str | None
    shared_secret: str | None

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "ProvisioningConfig":
        return cls(
            auth0_domain=config.get("AUTH0_DOMAIN"),
            client_id=config.get("AUTH0_MANAGEMENT_API_CLIENT_ID"),
            client_secret=config.get("AUTH0_MANAGEMENT_API_CLIENT_SECRET"),
            shared_secret=config.get("EMPOWER_SHARED_SECRET"),
        )


@dataclass(frozen=True)
class Created:
    user: User


@dataclass(frozen=True)
class Updated:
    user: User


ProvisioningResult = Union[Created, Updated]


def _coerce_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _has_attributes(payload: Mapping[str, Any], attributes: Tuple[str, ...]) -> bool:
    # A null value counts as missing.
    return all(payload.get(key) is not None for key in attributes)


class ProvisioningService:
    """Authenticate, validate, and apply Empower provisioning payloads."""

    def __init__(self, config: ProvisioningConfig, *, identity_client: Auth0ManagementClient | None = None) -> None:
        self.config = config
        self.identity_client = identity_client or Auth0ManagementClient(
            domain=config.auth0_domain,
            client_id=config.client_id,
            client_secret=config.client_secret,
        )

    # Guards ---------------------------------------------------------------------

    def authenticate_request(self, payload: Mapping[str, Any]) -> None:
        expected = self.config.shared_secret
        provided = payload.get(SHARED_SECRET_FIELD)
        if not expected or not isinstance(provided, str):
            raise AuthenticationFailure()
        if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            raise AuthenticationFailure()

    @staticmethod
    def validate_organization(payload: Mapping[str, Any]) -> None:
        if not _has_attributes(payload, ORGANIZATION_ATTRIBUTES):
            raise ValidationFailure(ORGANIZATION_ATTRIBUTES_MISSING_MESSAGE)

    @staticmethod
    def validate_user(payload: Mapping[str, Any]) -> None:
        if not _has_attributes(payload, USER_ATTRIBUTES):
            raise ValidationFailure(USER_ATTRIBUTES_MISSING_MESSAGE)
        try:
            int(payload["organization_id"])
        except (TypeError, ValueError):
            raise ValidationFailure(INVALID_ORGANIZATION_ID_MESSAGE) from None
        role = payload["role"]
        if not isinstance(role, str) or not role.strip():
            raise ValidationFailure(INVALID_ROLE_MESSAGE)

    # Writes ---------------------------------------------------------------------

    def create_organization(self, payload: Mapping[str, Any]) -> Organization:
        organization = Organization(name=payload["name"])
        try:
            db.session.add(organization)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        logger.info("Provisioned organization", extra={"organization_id": organization.id})
        return organization

    def create_user(self, payload: Mapping[str, Any]) -> ProvisioningResult:
        """Update the user matching ``payload['email']`` or create it (with an Auth0 account)."""

        existing = User.find_by_email(payload["email"])
        if existing is None:
            return Created(self._create_new_user(payload))
        return Updated(self._update_user(existing, payload))

    def _update_user(self, user: User, payload: Mapping[str, Any]) -> User:
        user.first_name = payload["first_name"]
        user.last_name = payload["last_name"]
        user.cell = payload["cell"]
        user.is_superadmin = _coerce_bool(payload["is_superadmin"])
        try:
            db.session.add(self._link(user, payload))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        logger.info("Updated provisioned user", extra={"user_id": user.id})
        return user

    def _create_new_user(self, payload: Mapping[str, Any]) -> User:
        try:
            token = self.identity_client.get_access_token()
        except Auth0Error as exc:
            raise UpstreamFailure(status_code=exc.status_code, body=exc.body, content_type=exc.content_type) from exc

        response = self.identity_client.create_user(payload["email"], token=token)
        if response.status_code != 201:
            logger.warning(
                "Auth0 refused user creation",
                extra={"status_code": response.status_code},
            )
            raise UpstreamFailure(
                status_code=response.status_code,
                body=response.text,
                content_type=response.headers.get("Content-Type"),
            )

        user = User(
            auth0_id=response.json().get("user_id"),
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            cell=payload["cell"],
            email=payload["email"],
            is_superadmin=_coerce_bool(payload["is_superadmin"]),
        )
        try:
            db.session.add(user)
            db.session.flush()
            db.session.add(self._link(user, payload))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        logger.info("Provisioned new user", extra={"user_id": user.id, "auth0_id": user.auth0_id})
        return user

    @staticmethod
    def _link(user: User, payload: Mapping[str, Any]) -> UserOrganization:
        # A new link row is written on every call, even if an identical one exists.
        return UserOrganization(
            user_id=user.id,
            organization_id=int(payload["organization_id"]),
            role=payload["role"].strip().upper(),
        )
