"""Server-wide constants."""

PROJECT_NAME = "AgentChain"
API_V1_STR = "/api/v1"
