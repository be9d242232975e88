from typing import Literal

from pydantic_settings import BaseSettings
from sanic.log import logger


class Config(BaseSettings):
    API_URL: str
    API_TOKEN: str

    DEFAULT_NAMESPACE: str = "default"

    OVERRIDE_LOGGING: Literal[
        "CRITICAL",
        "FATAL",
        "ERROR",
        "WARNING",
        "WARN",
        "INFO",
        "DEBUG",
        "NOTSET",
    ] = "INFO"

    # Generic webhook payloads above this size are rejected
    MAX_PAYLOAD_SIZE: int = 10 * 1024 * 1024

    # Branch a build configuration follows when its git source names none
    DEFAULT_CONFIG_REF: str = "master"

    HEALTH_RATE_LIMIT: int = 10

    def print_config(self):
        """Print configuration values with sensitive attributes masked"""
        sensitive_attrs = {
            "API_TOKEN",
        }

        logger.info("=== CI Trigger Configuration ===")
        for field_name, field_value in self.model_dump().items():
            if field_name in sensitive_attrs:
                logger.info(f"{field_name}: ***")
            else:
                logger.info(f"{field_name}: {field_value}")
        logger.info("================================")
