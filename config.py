"""
Configuration management for the WhatsApp relay.

Loads environment variables from .env file and provides typed access to configuration.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)


class Config:
    """Configuration class for the relay server and Infobip transport."""

    SERVICE_NAME = "WhatsApp Webhook"

    # Agent API Configuration
    AGENT_PORT = int(os.getenv("AGENT_PORT", os.getenv("PORT", "3000")))

    # Infobip WhatsApp Configuration
    INFOBIP_API_KEY = os.getenv("INFOBIP_API_KEY", "")
    INFOBIP_BASE_URL = os.getenv("INFOBIP_BASE_URL", "https://api.infobip.com")
    WHATSAPP_SENDER = os.getenv("WHATSAPP_SENDER", "")

    # LLM Backend Configuration
    LLM_BACKEND = os.getenv("LLM_BACKEND", "openai")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["INFOBIP_API_KEY", "WHATSAPP_SENDER"]
        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            logger.warning(f"Missing required environment variables: {', '.join(missing)}")
            return False

        if len(cls.INFOBIP_API_KEY) < 20:
            logger.warning("INFOBIP_API_KEY seems unusually short. Please verify it is correct.")

        return True

    @classmethod
    def masked_api_key(cls) -> str:
        """API key safe for logs: first 10 and last 4 characters."""
        key = cls.INFOBIP_API_KEY
        if not key:
            return "NOT SET"
        if len(key) <= 14:
            return "*" * len(key)
        return f"{key[:10]}...{key[-4:]}"
