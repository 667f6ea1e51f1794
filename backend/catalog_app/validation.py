from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class CatalogError(Exception):
    """Base for errors that map onto an HTTP status."""
    status_code = 500


class ValidationError(CatalogError):
    """400-level input problem (missing required field, bad parameter)."""
    status_code = 400


class AuthError(CatalogError):
    """401: missing or invalid admin credential."""
    status_code = 401


class NotFoundError(CatalogError):
    """404: unknown SKU on approve/reject or unmapped image."""
    status_code = 404


class DuplicateError(CatalogError):
    """409-level business rule conflict (SKU already in catalog or pending)."""
    status_code = 409

    def __init__(self, message: str, sku: str = "", location: str = ""):
        super().__init__(message)
        self.sku = sku
        self.location = location


class RefreshInProgressError(CatalogError):
    """409: another refresh holds the busy flag."""
    status_code = 409


class MalformedCSVError(CatalogError):
    status_code = 400


class UnsupportedFileTypeError(CatalogError):
    status_code = 415


class UpstreamError(CatalogError):
    """Google Sheets / Drive call failed."""
    status_code = 502


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields that must be present and non-blank
    """
    writable_fields: tuple[str, ...]
    required_on_create: tuple[str, ...] = ()


def _clean_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be a string")
    return str(value).strip()


def validate_payload(*, payload: Any, policy: PayloadPolicy) -> dict[str, str]:
    """
    Validates + normalizes an incoming JSON object against a policy.

    Unknown keys are rejected, values are coerced to stripped strings and
    every writable field is present in the result (blank when omitted).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch = {k: _clean_value(k, payload.get(k)) for k in policy.writable_fields}

    missing = [f for f in policy.required_on_create if not patch.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    return patch
