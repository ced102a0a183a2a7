"""CSV upload loader: parse locally, ship the contacts to a pre-signed storage URL."""

from __future__ import annotations

from campaign_app.contact_loaders.registry import LoaderAvailability

from .contract import REQUIRED_UPLOAD_FIELDS, TOP_LEVEL_UPLOAD_FIELDS, ensure_camel_case_required_headers
from .parser import (
    ContactCSVParser,
    MissingFieldsError,
    ParsedContacts,
    ParseFailure,
    ValidationStats,
    parse_contacts_csv,
)
from .pipeline import (
    ClientChoiceData,
    ContactCollection,
    ContactUploadPipeline,
    UploadState,
    UploadStatus,
    UploadTransferFailure,
    decode_contact_collection,
    encode_contact_collection,
)

name = "csv-s3-upload"

__all__ = [
    "REQUIRED_UPLOAD_FIELDS",
    "TOP_LEVEL_UPLOAD_FIELDS",
    "ensure_camel_case_required_headers",
    "ContactCSVParser",
    "MissingFieldsError",
    "ParsedContacts",
    "ParseFailure",
    "ValidationStats",
    "parse_contacts_csv",
    "ClientChoiceData",
    "ContactCollection",
    "ContactUploadPipeline",
    "UploadState",
    "UploadStatus",
    "UploadTransferFailure",
    "decode_contact_collection",
    "encode_contact_collection",
    "available",
]


def available(config) -> LoaderAvailability:
    """The uploader runs entirely from the campaign admin, so it is always usable."""

    return LoaderAvailability(result=True, expires_seconds=0)
