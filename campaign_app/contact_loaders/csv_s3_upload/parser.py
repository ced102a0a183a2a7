"""CSV parsing for contact uploads.

Reads an uploaded CSV, reconciles headers with the upload contract, and
produces contact rows plus statistics about the rows that were dropped
(missing or invalid cell numbers, duplicates).
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import IO, Callable, Iterable, Mapping, Tuple

import phonenumbers

from .contract import custom_fields_for, ensure_camel_case_required_headers, missing_required_fields

logger = logging.getLogger(__name__)

HeaderTransformer = Callable[[str], str]

_ZIP_REGEX = re.compile(r"(\d{5})([ \-]\d{4})?")

ContactRecord = Mapping[str, object]


class ParseFailure(Exception):
    """Raised when an uploaded file cannot be read as a contact CSV."""


class MissingFieldsError(ParseFailure):
    """Raised when the header row lacks required upload fields."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Missing fields: {', '.join(self.missing)}")


@dataclass(frozen=True)
class ValidationStats:
    """Counts of rows removed while validating an upload."""

    dupe_count: int = 0
    missing_cell_count: int = 0
    invalid_cell_count: int = 0
    zip_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "dupeCount": self.dupe_count,
            "missingCellCount": self.missing_cell_count,
            "invalidCellCount": self.invalid_cell_count,
            "zipCount": self.zip_count,
        }


@dataclass(frozen=True)
class ParsedContacts:
    """Result of parsing an upload: retained contacts, custom columns, and drop statistics."""

    contacts: Tuple[ContactRecord, ...]
    custom_fields: Tuple[str, ...]
    validation_stats: ValidationStats


def format_phone_number(cell: object | None, country: str = "US") -> str | None:
    """
    Normalize a phone number to E.164, or return ``None`` when it is not a valid number.

    Numbers without a country prefix are interpreted for ``country``.
    """

    if cell is None:
        return None
    token = str(cell).strip()
    if not token:
        return None
    try:
        parsed = phonenumbers.parse(token, country)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def format_zip(zip_code: object | None, country: str = "US") -> str | None:
    """Reduce a US postal code to its five-digit form; other countries keep the trimmed value."""

    if zip_code is None:
        return None
    token = str(zip_code).strip()
    if not token:
        return None
    if country != "US":
        return token
    match = _ZIP_REGEX.search(token)
    return match.group(1) if match else None


def _sanitize_header(header: str | None) -> str:
    token = (header or "").strip()
    return token.lstrip("\ufeff")


def _row_is_blank(row: Mapping[str, object | None]) -> bool:
    return all((value is None or (isinstance(value, str) and value.strip() == "")) for value in row.values())


def _as_text_stream(file_obj: IO) -> IO[str]:
    if hasattr(file_obj, "seek"):
        file_obj.seek(0)
    content = file_obj.read()
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseFailure("Unable to read file: contact uploads must be UTF-8 encoded CSV.") from exc
    return io.StringIO(content, newline="")


class ContactCSVParser:
    """Parse a contact CSV according to the upload contract."""

    def __init__(
        self,
        *,
        header_transformer: HeaderTransformer | None = ensure_camel_case_required_headers,
        country: str = "US",
    ) -> None:
        self.header_transformer = header_transformer
        self.country = country

    def parse(self, file_obj: IO) -> ParsedContacts:
        reader = csv.DictReader(_as_text_stream(file_obj))
        try:
            raw_headers = reader.fieldnames
        except csv.Error as exc:
            raise ParseFailure(f"Unable to parse CSV header: {exc}") from exc
        if not raw_headers:
            raise MissingFieldsError(missing_required_fields(()))

        headers = [_sanitize_header(header) for header in raw_headers]
        if self.header_transformer is not None:
            headers = [self.header_transformer(header) for header in headers]
        reader.fieldnames = headers

        missing = missing_required_fields(headers)
        if missing:
            raise MissingFieldsError(missing)

        try:
            # Values past the last header land under the ``None`` key, blank headers under ``""``; drop both.
            rows = [
                {key: value for key, value in row.items() if key}
                for row in reader
                if not _row_is_blank(row)
            ]
        except csv.Error as exc:
            raise ParseFailure(f"Unable to parse CSV line {reader.line_num}: {exc}") from exc

        contacts, stats = self._validate(rows)
        custom_fields = custom_fields_for(header for header in headers if header)
        logger.debug(
            "Parsed contact CSV",
            extra={"contacts": len(contacts), "custom_fields": len(custom_fields), **stats.to_dict()},
        )
        return ParsedContacts(contacts=contacts, custom_fields=custom_fields, validation_stats=stats)

    def _validate(self, rows: list[dict[str, object | None]]) -> tuple[Tuple[ContactRecord, ...], ValidationStats]:
        missing_cell_count = 0
        invalid_cell_count = 0
        dupe_count = 0
        seen_cells: set[str] = set()
        contacts: list[ContactRecord] = []

        for row in rows:
            raw_cell = row.get("cell")
            if raw_cell is None or not str(raw_cell).strip():
                missing_cell_count += 1
                continue
            cell = format_phone_number(raw_cell, self.country)
            if cell is None:
                invalid_cell_count += 1
                continue
            if cell in seen_cells:
                dupe_count += 1
                continue
            seen_cells.add(cell)

            row["cell"] = cell
            row["zip"] = format_zip(row.get("zip"), self.country)
            contacts.append(MappingProxyType(row))

        stats = ValidationStats(
            dupe_count=dupe_count,
            missing_cell_count=missing_cell_count,
            invalid_cell_count=invalid_cell_count,
            zip_count=sum(1 for contact in contacts if contact["zip"]),
        )
        return tuple(contacts), stats


def parse_contacts_csv(
    file_obj: IO,
    *,
    header_transformer: HeaderTransformer | None = ensure_camel_case_required_headers,
    country: str = "US",
) -> ParsedContacts:
    """Convenience wrapper around :class:`ContactCSVParser`."""

    return ContactCSVParser(header_transformer=header_transformer, country=country).parse(file_obj)
