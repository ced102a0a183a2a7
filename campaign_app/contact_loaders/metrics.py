"""Prometheus metrics helpers for the contact loaders."""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter

_csv_upload_counter = Counter(
    "contact_loader_csv_uploads_total",
    "Contact CSV uploads by outcome.",
    ["outcome"],
)
_provisioning_request_counter = Counter(
    "contact_loader_empower_requests_total",
    "Empower provisioning requests by endpoint and outcome.",
    ["endpoint", "outcome"],
)
_auth0_request_counter = Counter(
    "contact_loader_auth0_requests_total",
    "Auth0 management API calls by operation and outcome.",
    ["operation", "outcome"],
)

UploadOutcome = Literal["success", "parse_error", "empty", "transfer_error"]


def record_upload_outcome(outcome: UploadOutcome) -> None:
    """Increment the CSV upload counter for ``outcome``."""

    _csv_upload_counter.labels(outcome=outcome).inc()


def record_provisioning_request(endpoint: str, outcome: str) -> None:
    """Increment the provisioning request counter."""

    _provisioning_request_counter.labels(endpoint=endpoint, outcome=outcome).inc()


def record_auth0_request(operation: str, outcome: Literal["success", "failure"]) -> None:
    _auth0_request_counter.labels(operation=operation, outcome=outcome).inc()
