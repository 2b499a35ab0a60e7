from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class NewsletterContactModel(BaseModel):
    email: str
    contact_id: Optional[str] = None
    list_ids: List[int] = Field(default_factory=list)
    blacklisted: bool = False
    attributes: Dict[str, Any] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict)


class CreatedContactModel(BaseModel):
    contact_id: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_contact_response(raw: Dict[str, Any], *, fallback_email: str) -> NewsletterContactModel:
    """Normalize a `GET /contacts/{email}` payload from the newsletter provider."""
    if not isinstance(raw, dict):
        raise IntegrationResponseError("Contact lookup returned a non-object payload.")

    email = str(_first_non_empty(raw, "email", "email_address", default=fallback_email)).strip().lower()
    contact_id = _first_non_empty(raw, "id", "contact_id", "contactId", default="")
    list_ids = raw.get("listIds") if isinstance(raw.get("listIds"), list) else []
    attributes = raw.get("attributes") if isinstance(raw.get("attributes"), dict) else {}

    return _build_model(
        NewsletterContactModel,
        {
            "email": email,
            "contact_id": str(contact_id) or None,
            "list_ids": list_ids,
            "blacklisted": bool(raw.get("emailBlacklisted", False)),
            "attributes": attributes,
            "raw": raw,
        },
        raw,
    )


def normalize_created_contact(raw: Optional[Dict[str, Any]]) -> CreatedContactModel:
    """Normalize a `POST /contacts` payload. Updates of an existing contact return an empty body."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise IntegrationResponseError("Contact creation returned a non-object payload.")
    contact_id = _first_non_empty(raw, "id", "contact_id", "subscriberId", default="")
    return _build_model(CreatedContactModel, {"contact_id": str(contact_id) or None, "raw": raw}, raw)


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None:
        return default
    raise IntegrationResponseError(f"Missing required field. Checked keys: {', '.join(keys)}", payload=data)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
