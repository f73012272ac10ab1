"""
Custom Provider API Endpoints.

Register, list, inspect and delete template-driven custom providers, validate
a configuration without saving it, and list the ready-made templates.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Response, status

from agentchain.agent_core.providers.presets import PROVIDER_TEMPLATES, ProviderTemplate
from agentchain.agent_core.providers.validation import parse_provider_config, validate_provider_config
from agentchain.agent_core.schemas.provider import CustomProviderConfig
from agentchain.core.logging_config import get_logger
from agentchain.server.schemas import ProviderValidationResponse, ValidationIssue
from agentchain.server.services.deps import WorkflowServiceDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=List[CustomProviderConfig],
    summary="List Custom Providers",
    description="List every registered custom provider, oldest first.",
)
async def list_providers(service: WorkflowServiceDep):
    return service.providers.list()


@router.post(
    "/",
    response_model=CustomProviderConfig,
    status_code=status.HTTP_201_CREATED,
    summary="Register Custom Provider",
    description="Validate and register a custom provider configuration.",
    responses={
        400: {"description": "Invalid provider configuration"},
        409: {"description": "A provider with the same name already exists"},
    },
)
async def create_provider(config: Dict[str, Any], service: WorkflowServiceDep):
    provider = parse_provider_config(config, require_models=True)
    try:
        saved = service.providers.save(provider)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    logger.info(f"Registered custom provider: {saved.name} ({saved.id})")
    return saved


@router.get(
    "/templates",
    response_model=List[ProviderTemplate],
    summary="List Provider Templates",
    description="Ready-made starting configurations for common provider APIs.",
)
async def list_templates():
    return PROVIDER_TEMPLATES


@router.post(
    "/validate",
    response_model=ProviderValidationResponse,
    summary="Validate Provider Configuration",
    description="Check a custom provider configuration without registering it.",
)
async def validate_provider(config: Dict[str, Any]):
    errors = validate_provider_config(config, require_models=True)
    return ProviderValidationResponse(
        valid=not errors,
        errors=[ValidationIssue(**e) for e in errors],
    )


@router.get(
    "/{provider_id}",
    response_model=CustomProviderConfig,
    summary="Get Custom Provider",
    responses={404: {"description": "Provider not found"}},
)
async def get_provider(provider_id: str, service: WorkflowServiceDep):
    provider = service.providers.get(provider_id)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Provider not found")
    return provider


@router.delete(
    "/{provider_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Custom Provider",
    responses={404: {"description": "Provider not found"}},
)
async def delete_provider(provider_id: str, service: WorkflowServiceDep):
    if not service.providers.delete(provider_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Provider not found")
    logger.info(f"Deleted custom provider: {provider_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
