"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# LLM Provider Configuration Models
# =====================================================================


class OpenAIConfig(BaseModel):
    """OpenAI API configuration."""

    api_key: Optional[str] = Field(
        default=None, alias="OPENAI_API_KEY", description="OpenAI API key for authentication"
    )
    base_url: str = Field(
        default="https://api.openai.com", alias="OPENAI_BASE_URL", description="OpenAI API base URL"
    )

    model_config = {"populate_by_name": True}


class AnthropicConfig(BaseModel):
    """Anthropic API configuration."""

    api_key: Optional[str] = Field(
        default=None, alias="ANTHROPIC_API_KEY", description="Anthropic API key for authentication"
    )
    base_url: str = Field(
        default="https://api.anthropic.com", alias="ANTHROPIC_BASE_URL", description="Anthropic API base URL"
    )
    api_version: str = Field(
        default="2023-06-01", alias="ANTHROPIC_API_VERSION", description="Value sent in the anthropic-version header"
    )

    model_config = {"populate_by_name": True}


class GoogleConfig(BaseModel):
    """Google AI (Gemini) API configuration."""

    api_key: Optional[str] = Field(
        default=None, alias="GOOGLE_API_KEY", description="Google AI API key for authentication"
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        alias="GOOGLE_BASE_URL",
        description="Google AI API base URL",
    )

    model_config = {"populate_by_name": True}


class EngineConfig(BaseModel):
    """Workflow engine tunables."""

    max_retries: int = Field(
        default=3, ge=0, alias="AGENTCHAIN_MAX_RETRIES", description="Retries allowed per agent beyond the first attempt"
    )
    retry_base_delay: float = Field(
        default=2.0,
        ge=0.0,
        alias="AGENTCHAIN_RETRY_BASE_DELAY",
        description="Base delay in seconds; attempt n waits base * 2**n",
    )
    request_timeout: float = Field(
        default=60.0, gt=0.0, alias="AGENTCHAIN_REQUEST_TIMEOUT", description="Per-call provider timeout in seconds"
    )
    max_output_tokens: int = Field(
        default=1024, gt=0, alias="AGENTCHAIN_MAX_OUTPUT_TOKENS", description="max_tokens sent to built-in providers"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="AgentChain server host address to bind to",
        alias="AGENTCHAIN_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="AgentChain server port number",
        alias="AGENTCHAIN_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="AGENTCHAIN_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="AGENTCHAIN_LOG_FORMAT",
    )
    log_file_dir: str = Field(default="logs", alias="AGENTCHAIN_LOG_FILE_DIR")
    enable_file_logging: bool = Field(default=False, alias="AGENTCHAIN_ENABLE_FILE_LOGGING")

    # =====================================================================
    # Engine Configuration
    # =====================================================================
    max_retries: int = Field(default=3, alias="AGENTCHAIN_MAX_RETRIES")
    retry_base_delay: float = Field(default=2.0, alias="AGENTCHAIN_RETRY_BASE_DELAY")
    request_timeout: float = Field(default=60.0, alias="AGENTCHAIN_REQUEST_TIMEOUT")
    max_output_tokens: int = Field(default=1024, alias="AGENTCHAIN_MAX_OUTPUT_TOKENS")

    # =====================================================================
    # Provider Credentials and Endpoints
    # =====================================================================
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com", alias="OPENAI_BASE_URL")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_base_url: str = Field(default="https://api.anthropic.com", alias="ANTHROPIC_BASE_URL")
    anthropic_api_version: str = Field(default="2023-06-01", alias="ANTHROPIC_API_VERSION")
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    google_base_url: str = Field(default="https://generativelanguage.googleapis.com", alias="GOOGLE_BASE_URL")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def engine(self) -> EngineConfig:
        """Get workflow engine configuration from environment variables."""
        return EngineConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def openai(self) -> OpenAIConfig:
        """Get OpenAI configuration from environment variables."""
        return OpenAIConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def anthropic(self) -> AnthropicConfig:
        """Get Anthropic configuration from environment variables."""
        return AnthropicConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def google(self) -> GoogleConfig:
        """Get Google AI configuration from environment variables."""
        return GoogleConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
