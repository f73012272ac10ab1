"""Ready-made custom provider templates.

Starting points for registering a custom provider: an OpenAI-compatible chat
completions API, the Google AI Gemini API, and an empty configuration.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from ..schemas.base import FrozenSchema


class ProviderTemplateDocs(FrozenSchema):
    endpoint: str
    auth: str
    request_format: str
    response_format: str
    models: Optional[str] = None


class ProviderTemplate(FrozenSchema):
    """A named, documented starting configuration for a custom provider."""

    id: str
    name: str
    description: str
    config: Dict[str, Any] = Field(default_factory=dict)
    documentation: ProviderTemplateDocs


PROVIDER_TEMPLATES: List[ProviderTemplate] = [
    ProviderTemplate(
        id="openai-compatible",
        name="OpenAI Compatible",
        description="For APIs that follow the OpenAI Chat Completions format",
        config={
            "endpoint": "https://api.example.com/v1/chat/completions",
            "auth": {"type": "bearer", "key": "Authorization"},
            "requestTemplate": {
                "body": {
                    "model": "{{model}}",
                    "messages": [{"role": "user", "content": "{{prompt}}"}],
                }
            },
            "responsePath": "choices[0].message.content",
        },
        documentation=ProviderTemplateDocs(
            endpoint="The base URL for your API endpoint",
            auth="Bearer token authentication (standard OpenAI format)",
            request_format="OpenAI chat completions format with messages array",
            response_format="Standard OpenAI response format with choices array",
            models="List your compatible model IDs",
        ),
    ),
    ProviderTemplate(
        id="google-ai",
        name="Google AI",
        description="Google AI Gemini API format",
        config={
            "endpoint": "https://generativelanguage.googleapis.com/v1/models/{{model}}:generateContent",
            "auth": {"type": "query", "key": "key"},
            "requestTemplate": {"body": {"contents": [{"parts": [{"text": "{{prompt}}"}]}]}},
            "responsePath": "candidates[0].content.parts[0].text",
            "models": ["gemini-1.5-pro", "gemini-1.5-flash"],
        },
        documentation=ProviderTemplateDocs(
            endpoint="Google AI API endpoint with model parameter",
            auth="API key as URL query parameter",
            request_format="Google AI Gemini request format with contents array",
            response_format="Gemini response format with candidates array",
            models="Available Gemini model versions",
        ),
    ),
    ProviderTemplate(
        id="custom",
        name="Custom",
        description="Create a custom provider configuration from scratch",
        config={
            "endpoint": "",
            "auth": {"type": "bearer", "key": "Authorization"},
            "requestTemplate": {"body": {}, "query": {}},
            "responsePath": "",
            "models": [],
        },
        documentation=ProviderTemplateDocs(
            endpoint="Your API endpoint URL",
            auth="Authentication method and key name",
            request_format="Request body/query template with {{prompt}} and {{model}} variables",
            response_format='Path to extract response text (e.g., "response.text" or "data.content")',
            models="List of available model IDs",
        ),
    ),
]


def get_provider_template(template_id: str) -> ProviderTemplate:
    """Look up a template by id.

    Raises:
        KeyError: If no template has that id.
    """
    for template in PROVIDER_TEMPLATES:
        if template.id == template_id:
            return template
    raise KeyError(template_id)
