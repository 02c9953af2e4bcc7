"""
Configuration settings for the liquidity points sandbox API

Loads environment variables and provides application configuration.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings"""

    # API Configuration
    API_VERSION: str = "1.0.0"
    API_TITLE: str = "Liquidity Points Sandbox API"
    API_DESCRIPTION: str = "Time-weighted liquidity points and reward streams on an in-memory tick-based pool"

    # Sandbox pool
    SANDBOX_TOKEN0: str = os.getenv("SANDBOX_TOKEN0", "0x1000000000000000000000000000000000000000")
    SANDBOX_TOKEN1: str = os.getenv("SANDBOX_TOKEN1", "0x2000000000000000000000000000000000000000")
    SANDBOX_HOOK: str = os.getenv("SANDBOX_HOOK", "0x00000000000000000000000000000000000000AA")
    SANDBOX_LP_FEE: int = int(os.getenv("SANDBOX_LP_FEE", 3000))
    SANDBOX_PROTOCOL_FEE: int = int(os.getenv("SANDBOX_PROTOCOL_FEE", 0))
    SANDBOX_TICK_SPACING: int = int(os.getenv("SANDBOX_TICK_SPACING", 60))
    SANDBOX_INITIAL_TICK: int = int(os.getenv("SANDBOX_INITIAL_TICK", 0))
    # 0 = start the sandbox clock at wall time
    SANDBOX_START_TIME: int = int(os.getenv("SANDBOX_START_TIME", 0))

    # CORS Configuration
    CORS_ORIGINS: List[str] = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000"
    ).split(",")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Request Limits
    MAX_ADVANCE_SECONDS: int = 365 * 24 * 3600


# Create global settings instance
settings = Settings()


# Validate critical settings on import
if settings.SANDBOX_PROTOCOL_FEE and settings.SANDBOX_PROTOCOL_FEE > 1000:
    print("⚠️  WARNING: SANDBOX_PROTOCOL_FEE above 1000 pips will be rejected")
