"""
Auth0 Management API client used when provisioning brand-new users.
"""

from __future__ import annotations

import logging

import requests

from campaign_app.contact_loaders.metrics import record_auth0_request

# Auth0 passwordless connection used for accounts created by provisioning.
USER_CONNECTION = "email"


class Auth0Error(RuntimeError):
    """Raised when the Auth0 management API rejects a request."""

    def __init__(self, message: str, *, status_code: int, body: str, content_type: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.content_type = content_type


class Auth0ManagementClient:
    """Thin wrapper around the two management API calls provisioning needs."""

    def __init__(
        self,
        *,
        domain: str | None,
        client_id: str | None,
        client_secret: str | None,
        session: requests.Session | None = None,
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.domain = domain
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def token_url(self) -> str:
        return f"https://{self.domain}/oauth/token"

    @property
    def audience(self) -> str:
        return f"https://{self.domain}/api/v2/"

    @property
    def users_url(self) -> str:
        return f"https://{self.domain}/api/v2/users"

    def get_access_token(self) -> str:
        """Fetch a management API token with the client-credentials grant. Not cached."""

        response = self.session.post(
            self.token_url,
            headers={"content-type": "application/json"},
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "audience": self.audience,
                "grant_type": "client_credentials",
            },
            timeout=self.timeout,
        )
        if not response.ok:
            record_auth0_request("token", "failure")
            self.logger.error(
                "Auth0 token request failed",
                extra={"status_code": response.status_code, "auth0_domain": self.domain},
            )
            raise Auth0Error(
                f"Auth0 token request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                content_type=response.headers.get("Content-Type"),
            )
        record_auth0_request("token", "success")
        return response.json().get("access_token")

    def create_user(self, email: str, *, token: str) -> requests.Response:
        """
        Create a passwordless Auth0 account for ``email``.

        The raw response is returned; Auth0 answers 201 on success.
        """

        response = self.session.post(
            self.users_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            json={"email": email, "connection": USER_CONNECTION},
            timeout=self.timeout,
        )
        record_auth0_request("create_user", "success" if response.status_code == 201 else "failure")
        self.logger.debug("Auth0 create user responded", extra={"status_code": response.status_code})
        return response
