"""Custom provider configuration models.

A custom provider describes how to talk to an arbitrary JSON-over-HTTP LLM
endpoint: where to send the request, how to authenticate, how the request
body is shaped (with ``{{prompt}}``, ``{{model}}`` and ``{{api_key}}``
placeholders) and where the generated text lives in the response.

The request template shape is resolved once, when the configuration is
parsed, into one of two tagged variants:

- ``StructuredRequestTemplate``: the raw template had a ``body`` and/or a
  ``query`` section.
- ``BareRequestTemplate``: the whole raw template is the request body.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ConfigDict, Field, model_validator

from .base import FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthKind(str, Enum):
    """Where the credential is placed on the outgoing request."""

    bearer = "bearer"  # ``<key_name>: Bearer <credential>`` header
    query = "query"  # ``?<key_name>=<credential>`` query parameter
    header = "header"  # ``<key_name>: <credential>`` header


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


class AuthSpec(FrozenSchema):
    """Authentication placement for a custom provider.

    Accepts the stored form ``{"type": "bearer", "key": "Authorization"}`` as
    well as the field names.
    """

    kind: AuthKind = Field(alias="type")
    key_name: str = Field(default="", alias="key")


class StructuredRequestTemplate(FrozenSchema):
    """Request template with separate body and query sections."""

    shape: Literal["structured"] = "structured"
    body: Any = None
    query: Dict[str, str] = Field(default_factory=dict)


class BareRequestTemplate(FrozenSchema):
    """Request template whose whole content is the request body."""

    shape: Literal["bare"] = "bare"
    body: Any = None


RequestTemplate = Annotated[
    Union[StructuredRequestTemplate, BareRequestTemplate],
    Field(discriminator="shape"),
]


def coerce_request_template(raw: Any) -> Any:
    """Decide the template variant for a raw request template.

    Already-tagged templates and model instances pass through untouched.
    """
    if isinstance(raw, (StructuredRequestTemplate, BareRequestTemplate)):
        return raw
    if isinstance(raw, Mapping):
        if raw.get("shape") in ("structured", "bare"):
            return raw
        if "body" in raw or "query" in raw:
            return {"shape": "structured", "body": raw.get("body"), "query": dict(raw.get("query") or {})}
    return {"shape": "bare", "body": raw}


class CustomProviderConfig(FrozenSchema):
    """
    A user-registered, template-driven provider.

    Owned by the provider store; the workflow engine only reads it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    endpoint: str
    method: HttpMethod = HttpMethod.POST
    auth: AuthSpec
    headers: Dict[str, str] = Field(default_factory=dict)
    request_template: RequestTemplate = Field(alias="requestTemplate")
    response_path: str = Field(alias="responsePath")
    models: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")

    @model_validator(mode="before")
    @classmethod
    def _tag_request_template(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        for key in ("requestTemplate", "request_template"):
            if key in data:
                data[key] = coerce_request_template(data[key])
        return data
