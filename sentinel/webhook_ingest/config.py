"""Configuration for GitHub webhook ingestion."""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from ..models.jobs import DEFAULT_PRIORITY
from ..models.queue import DEFAULT_QUEUE_NAME

# Load environment variables from .env file
load_dotenv()


@dataclass
class WebhookIngestConfig:
    """Configuration for GitHub webhook ingestion."""

    # Webhook settings; an empty secret rejects every request
    webhook_secret: str = ""
    webhook_endpoint: str = "/webhook/github"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_dir: Optional[str] = None
    log_level: str = "info"

    # Queue settings
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    queue_name: str = DEFAULT_QUEUE_NAME
    default_priority: int = DEFAULT_PRIORITY

    @classmethod
    def from_env(cls) -> "WebhookIngestConfig":
        """Create configuration from environment variables."""
        return cls(
            webhook_secret=os.getenv("GITHUB_WEBHOOK_SECRET", ""),
            webhook_endpoint=os.getenv("SENTINEL_WEBHOOK_ENDPOINT", "/webhook/github"),
            host=os.getenv("SENTINEL_HOST", "0.0.0.0"),
            port=int(os.getenv("SENTINEL_PORT", "3000")),
            log_dir=os.getenv("SENTINEL_LOG_DIR", "logs"),
            log_level=os.getenv("LOG_LEVEL", "info"),
            redis_host=os.getenv("REDIS_HOST", "localhost"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
            redis_password=os.getenv("REDIS_PASSWORD") or None,
            queue_name=os.getenv("SENTINEL_QUEUE_NAME", DEFAULT_QUEUE_NAME),
            default_priority=int(os.getenv("SENTINEL_DEFAULT_PRIORITY", str(DEFAULT_PRIORITY))),
        )
