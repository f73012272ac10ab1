"""Validation of raw custom provider configurations.

``validate_provider_config`` collects every problem as ``{"field", "message"}``
entries instead of stopping at the first one, so a configuration form can show
all of them at once. ``parse_provider_config`` validates and builds the
``CustomProviderConfig`` in one step.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import httpx
from pydantic import ValidationError

from ..schemas.provider import AuthKind, CustomProviderConfig, HttpMethod
from .errors import ProviderConfigValidationError

REQUIRED_FIELDS = ("name", "endpoint", "auth", "requestTemplate", "responsePath")

_ALIASES = {"request_template": "requestTemplate", "response_path": "responsePath"}


def _normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {_ALIASES.get(k, k): v for k, v in raw.items()}


def validate_provider_config(raw: Mapping[str, Any], *, require_models: bool = False) -> List[Dict[str, str]]:
    """Return every validation problem found in ``raw``; empty when valid."""
    config = _normalize_keys(raw)
    errors: List[Dict[str, str]] = []

    for field in REQUIRED_FIELDS:
        if not config.get(field):
            errors.append({"field": field, "message": f"{field} is required"})

    auth = config.get("auth")
    if auth:
        if not isinstance(auth, Mapping):
            errors.append({"field": "auth", "message": "auth must be an object"})
        else:
            kind = auth.get("type", auth.get("kind"))
            if kind not in {k.value for k in AuthKind}:
                errors.append(
                    {"field": "auth.type", "message": 'Invalid auth type. Must be "bearer", "query", or "header"'}
                )
            if not auth.get("key", auth.get("key_name")):
                errors.append({"field": "auth.key", "message": "Auth key is required"})

    template = config.get("requestTemplate")
    if template and not isinstance(template, Mapping):
        errors.append({"field": "requestTemplate", "message": "requestTemplate must be an object"})

    path = config.get("responsePath")
    if path and not isinstance(path, str):
        errors.append({"field": "responsePath", "message": "responsePath must be a string"})

    method = config.get("method")
    if method and method not in {m.value for m in HttpMethod}:
        errors.append({"field": "method", "message": 'Invalid HTTP method. Must be "GET", "POST", or "PUT"'})

    endpoint = config.get("endpoint")
    if endpoint and isinstance(endpoint, str):
        # Placeholders may appear in the path, so only the scheme and host are checked
        try:
            url = httpx.URL(endpoint)
            if url.scheme not in ("http", "https") or not url.host:
                raise ValueError(endpoint)
        except (httpx.InvalidURL, ValueError):
            errors.append({"field": "endpoint", "message": "Invalid endpoint URL"})

    if require_models:
        models = config.get("models")
        if not isinstance(models, list) or not models:
            errors.append({"field": "models", "message": "At least one model must be specified"})

    return errors


def parse_provider_config(raw: Mapping[str, Any], *, require_models: bool = False) -> CustomProviderConfig:
    """Validate ``raw`` and build a ``CustomProviderConfig``.

    Raises:
        ProviderConfigValidationError: With every problem found.
    """
    errors = validate_provider_config(raw, require_models=require_models)
    if errors:
        raise ProviderConfigValidationError(errors)
    try:
        return CustomProviderConfig.model_validate(_normalize_keys(raw))
    except ValidationError as e:
        raise ProviderConfigValidationError(
            [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()]
        ) from e
