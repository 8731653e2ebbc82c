# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration read from environment variables.
File paths, Slack access, scheduler behaviour and logging.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "rotation-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "9090"))

    POOL_DEFINITION_PATH: str = os.getenv("POOL_DEFINITION_PATH", "configuration.json")
    TASK_SELECTION_PATH: str = os.getenv(
        "TASK_SELECTION_PATH", "current_selection_storage.json"
    )
    GROUP_SELECTION_PATH: str = os.getenv(
        "GROUP_SELECTION_PATH", "current_support_selection_storage.json"
    )

    SLACK_TOKEN: str = os.getenv("SLACK_TOKEN", "")
    SLACK_API_URL: str = os.getenv("SLACK_API_URL", "https://slack.com/api")
    SLACK_TIMEOUT: float = float(os.getenv("SLACK_TIMEOUT", "10.0"))

    SCHEDULER_ENABLED: bool = (
        os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    )
    SCHEDULER_TIMEZONE: str = os.getenv("SCHEDULER_TIMEZONE", "UTC")
    SCHEDULER_MAX_INSTANCES: int = int(os.getenv("SCHEDULER_MAX_INSTANCES", "100"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
