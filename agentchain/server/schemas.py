"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from agentchain.agent_core.schemas.domain import AgentDefinition


class RunRequest(BaseModel):
    """
    Schema for starting a workflow run.

    Carries the full agent chain, the index to start from, and optional
    per-request API keys.
    """
    agents: List[AgentDefinition] = Field(
        ...,
        description="Ordered agents of the workflow. Each agent's output feeds the next one.",
    )
    from_index: int = Field(
        default=0,
        ge=0,
        description="Index of the first agent to execute. Results before it are carried over from the last run.",
    )
    api_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="Credentials keyed by provider identifier (built-in tag or custom provider id).",
        examples=[{"openai": "sk-..."}],
    )
    wait: bool = Field(
        default=False,
        description="Wait for the run to reach a terminal state before responding.",
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "agents": [
                {"title": "Researcher", "prompt": "List three facts about tides.", "provider": "openai", "model": "gpt-4o-mini"},
                {"title": "Editor", "prompt": "Rewrite the facts as a haiku.", "provider": "anthropic", "model": "claude-3-5-haiku-latest"},
            ],
            "from_index": 0,
        }
    })


class RetryRequest(BaseModel):
    """Schema for retrying the last workflow run."""
    agents: List[AgentDefinition] = Field(..., description="Ordered agents of the workflow.")
    api_keys: Dict[str, str] = Field(default_factory=dict)
    wait: bool = False


class StopResponse(BaseModel):
    stopped: bool = Field(..., description="True when an active run was asked to stop.")


class ValidationIssue(BaseModel):
    field: str
    message: str


class ProviderValidationResponse(BaseModel):
    """Result of validating a custom provider configuration."""
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
