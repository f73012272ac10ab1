"""
Logging Configuration Module.

Console logging for AgentChain with an optional DEBUG file log, driven by the
``AGENTCHAIN_LOG_*`` settings. Formats: simple, detailed (default) and json.
"""

import logging
from pathlib import Path
from typing import Optional

from agentchain.core.config import settings

LOG_FILE_DIR = settings.log_file_dir
ENABLE_FILE_LOGGING = settings.enable_file_logging

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"line": %(lineno)d, "message": "%(message)s"}'
)

MODULE_LOG_LEVELS = {
    "agentchain.agent_core": "DEBUG",
    "agentchain.server": "INFO",
    # provider adapters already log each request; keep the client libraries quiet
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def _format_for(fmt: str) -> str:
    if fmt == "json":
        return JSON_FORMAT
    if fmt == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Console level; defaults to ``AGENTCHAIN_LOG_LEVEL``.
        log_format: simple, detailed or json; defaults to ``AGENTCHAIN_LOG_FORMAT``.
        enable_file: Allow the file log when ``AGENTCHAIN_ENABLE_FILE_LOGGING`` is set.
    """
    level = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format
    formatter = logging.Formatter(_format_for(fmt), datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_logging = enable_file and ENABLE_FILE_LOGGING
    if file_logging:
        Path(LOG_FILE_DIR).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(LOG_FILE_DIR) / "agentchain.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
