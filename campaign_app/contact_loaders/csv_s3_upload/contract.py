"""Upload contract for contact CSV files.

Defines which columns every upload must carry, which columns are stored on the
contact row itself, and how loosely-cased headers are reconciled with the
canonical camelCase names.
"""

from __future__ import annotations

import re
from typing import Tuple

REQUIRED_UPLOAD_FIELDS: Tuple[str, ...] = ("firstName", "lastName", "cell")

# Columns persisted on the contact itself; every other column becomes a custom field.
TOP_LEVEL_UPLOAD_FIELDS: Tuple[str, ...] = ("firstName", "lastName", "cell", "zip", "external_id")

_SEPARATOR_RUN = re.compile(r"[-_\s]+(.)?")
_NUMERIC = re.compile(r"^[-+]?\d*\.?\d+$")


def camelize(value: str) -> str:
    """Fold ``snake_case``, ``kebab-case``, ``spaced words`` or ``PascalCase`` to camelCase."""

    if _NUMERIC.match(value):
        return value
    folded = _SEPARATOR_RUN.sub(lambda match: (match.group(1) or "").upper(), value)
    return folded[:1].lower() + folded[1:]


def ensure_camel_case_required_headers(column_header: str) -> str:
    """
    Rewrite a header to its camelCase form only when that form is a required upload field.

    ``first_name`` and ``FirstName`` become ``firstName``; ``last_name`` and
    ``LastName`` become ``lastName``. Custom-field headers are returned untouched.
    """

    camelized = camelize(column_header)
    if camelized in REQUIRED_UPLOAD_FIELDS and camelized != column_header:
        return camelized
    return column_header


def missing_required_fields(headers) -> Tuple[str, ...]:
    """Return the required upload fields absent from ``headers`` in contract order."""

    present = set(headers)
    return tuple(field for field in REQUIRED_UPLOAD_FIELDS if field not in present)


def custom_fields_for(headers) -> Tuple[str, ...]:
    """Return the headers that are not top-level upload fields, keeping file order."""

    return tuple(header for header in headers if header not in TOP_LEVEL_UPLOAD_FIELDS)
