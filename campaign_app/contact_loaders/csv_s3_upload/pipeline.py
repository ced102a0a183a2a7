"""
Contact upload pipeline for the ``csv-s3-upload`` loader.

Parses a CSV file, packs the validated contacts into a gzip-compressed,
base64-encoded JSON collection, and PUTs it to the pre-signed storage URL
handed over in the loader's client-choice data. On a completed transfer the
caller is notified with the storage key so the object can be fetched
server-side later.
"""

from __future__ import annotations

import base64
import gzip
import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import IO, Callable, Mapping, Sequence, Tuple

import requests

from campaign_app.contact_loaders.metrics import record_upload_outcome

from .parser import ContactCSVParser, ContactRecord, ParseFailure, ValidationStats

NO_CONTACTS_MESSAGE = "Upload at least one contact"


class UploadStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class UploadInProgressError(RuntimeError):
    """Raised when a second upload is started while one is still running."""


class ClientChoiceDataError(ValueError):
    """Raised when the client-choice payload lacks a usable storage destination."""


class UploadTransferFailure(RuntimeError):
    """Raised when the PUT to the pre-signed storage URL does not succeed."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass(frozen=True)
class UploadState:
    """Snapshot of the uploader: where it is in the lifecycle and what the last parse produced."""

    status: UploadStatus = UploadStatus.IDLE
    validation_stats: ValidationStats | None = None
    custom_fields: Tuple[str, ...] = ()
    contacts_count: int = 0
    error: str | None = None

    @property
    def uploading(self) -> bool:
        return self.status is UploadStatus.UPLOADING

    def start(self) -> "UploadState":
        return replace(self, status=UploadStatus.UPLOADING)

    def succeed(
        self,
        *,
        validation_stats: ValidationStats,
        custom_fields: Sequence[str],
        contacts_count: int,
    ) -> "UploadState":
        return UploadState(
            status=UploadStatus.SUCCESS,
            validation_stats=validation_stats,
            custom_fields=tuple(custom_fields),
            contacts_count=contacts_count,
            error=None,
        )

    def fail(self, message: str, *, keep_stats: bool = False) -> "UploadState":
        if keep_stats:
            return replace(self, status=UploadStatus.ERROR, error=message)
        return UploadState(status=UploadStatus.ERROR, error=message)


@dataclass(frozen=True)
class ClientChoiceData:
    """Storage destination issued to the uploader out-of-band."""

    s3_url: str
    s3_key: str

    @classmethod
    def from_json(cls, raw: str | Mapping[str, object]) -> "ClientChoiceData":
        if isinstance(raw, Mapping):
            data = raw
        else:
            try:
                data = json.loads(raw or "{}")
            except (TypeError, ValueError) as exc:
                raise ClientChoiceDataError(f"Client choice data is not valid JSON: {exc}") from exc
            if not isinstance(data, Mapping):
                raise ClientChoiceDataError("Client choice data must be a JSON object.")
        s3_url = data.get("s3Url")
        s3_key = data.get("s3key")
        if not s3_url or not s3_key:
            raise ClientChoiceDataError("Client choice data must include both s3Url and s3key.")
        return cls(s3_url=str(s3_url), s3_key=str(s3_key))


@dataclass(frozen=True)
class ContactCollection:
    """The unit shipped to storage: file name, counts, custom columns, and the contacts."""

    name: str | None
    custom_fields: Tuple[str, ...]
    contacts: Tuple[ContactRecord, ...] = field(default_factory=tuple)

    @property
    def contacts_count(self) -> int:
        return len(self.contacts)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "contactsCount": self.contacts_count,
            "customFields": list(self.custom_fields),
            "contacts": [dict(contact) for contact in self.contacts],
        }


def encode_contact_collection(collection: ContactCollection) -> str:
    """Serialize to compact JSON, gzip it, and return the base64 text."""

    serialized = json.dumps(collection.to_dict(), separators=(",", ":"))
    return base64.b64encode(gzip.compress(serialized.encode("utf-8"))).decode("ascii")


def decode_contact_collection(payload: str | bytes) -> dict[str, object]:
    """Inverse of :func:`encode_contact_collection`, used when the stored object is read back."""

    return json.loads(gzip.decompress(base64.b64decode(payload)).decode("utf-8"))


class ContactUploadPipeline:
    """Drive a single contact upload from file selection to storage transfer."""

    def __init__(
        self,
        client_choice_data: str | Mapping[str, object],
        on_change: Callable[[str], None],
        *,
        session: requests.Session | None = None,
        country: str = "US",
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client_choice_data = client_choice_data
        self.on_change = on_change
        self.session = session or requests.Session()
        self.parser = ContactCSVParser(country=country)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._state = UploadState()

    @property
    def state(self) -> UploadState:
        return self._state

    # Public API -----------------------------------------------------------------

    def handle_upload(self, file_obj: IO, file_name: str | None = None) -> UploadState:
        """Parse ``file_obj`` and, when it yields contacts, transfer them to storage."""

        if self._state.uploading:
            raise UploadInProgressError("An upload is already in progress.")
        self._state = self._state.start()

        try:
            parsed = self.parser.parse(file_obj)
        except ParseFailure as exc:
            return self._handle_upload_error(str(exc), outcome="parse_error")
        except Exception:
            self._state = self._state.fail("Contact upload failed unexpectedly.")
            raise

        if not parsed.contacts:
            return self._handle_upload_error(NO_CONTACTS_MESSAGE, outcome="empty")

        self._state = self._state.succeed(
            validation_stats=parsed.validation_stats,
            custom_fields=parsed.custom_fields,
            contacts_count=len(parsed.contacts),
        )
        collection = ContactCollection(
            name=file_name or None,
            custom_fields=parsed.custom_fields,
            contacts=parsed.contacts,
        )

        try:
            destination = ClientChoiceData.from_json(self.client_choice_data)
            self._transfer(destination, encode_contact_collection(collection))
        except (ClientChoiceDataError, UploadTransferFailure) as exc:
            message = f"Contact upload failed: {exc}"
            self.logger.error(message, extra={"file_name": file_name})
            record_upload_outcome("transfer_error")
            self._state = self._state.fail(message, keep_stats=True)
            return self._state

        record_upload_outcome("success")
        self.logger.info(
            "Contact upload stored",
            extra={"file_name": file_name, "contacts": collection.contacts_count, "s3_key": destination.s3_key},
        )
        self.on_change(destination.s3_key)
        return self._state

    # Internal helpers -----------------------------------------------------------

    def _handle_upload_error(self, message: str, *, outcome: str) -> UploadState:
        self.logger.warning("Contact upload rejected: %s", message)
        record_upload_outcome(outcome)
        self._state = self._state.fail(message)
        return self._state

    def _transfer(self, destination: ClientChoiceData, data: str) -> None:
        try:
            response = self.session.put(destination.s3_url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UploadTransferFailure(str(exc)) from exc
        if not response.ok:
            raise UploadTransferFailure(
                f"storage responded with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )


# Presentation helpers -----------------------------------------------------------


def describe_validation_stats(stats: ValidationStats | None) -> list[str]:
    """Human-readable lines for every non-zero drop counter."""

    if stats is None:
        return []
    lines = [
        (stats.dupe_count, "duplicates"),
        (stats.missing_cell_count, "rows with missing numbers"),
        (stats.invalid_cell_count, "rows with invalid numbers"),
    ]
    return [f"{count} {text} removed" for count, text in lines if count > 0]


def describe_contact_stats(state: UploadState) -> list[str]:
    """Summary of what the last successful parse kept."""

    if not state.contacts_count:
        return []
    return [
        f"{state.contacts_count} contacts",
        f"{len(state.custom_fields)} custom fields",
        *state.custom_fields,
    ]


def describe_last_result(last_result: Mapping[str, object] | None) -> str | None:
    """Return the uploaded file name recorded on a started campaign's last loader result."""

    raw = (last_result or {}).get("result") or "{}"
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if isinstance(data, Mapping) and data.get("filename"):
        return str(data["filename"])
    return None
