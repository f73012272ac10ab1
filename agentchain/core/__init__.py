"""
Core utilities and configuration for AgentChain.

This package provides core functionality including logging configuration,
settings and monitoring hooks shared by the engine and the server.
"""

from agentchain.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
