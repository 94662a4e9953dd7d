from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# -------------------------------------------------
# Explicitly load .env (CRITICAL)
# -------------------------------------------------

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    DATABASE_URL: str
    ENVIRONMENT: str = "development"
    SQL_ECHO: bool = False

    # Bearer secret for the cron-triggered endpoints. Empty = no auth (local development only).
    CRON_SECRET: str = ""

    # Twilio: accept TWILIO_MSG_SERVICE_SID or TWILIO_MESSAGING_SERVICE_SID
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_MSG_SERVICE_SID: str = Field(
        default="",
        validation_alias=AliasChoices("TWILIO_MSG_SERVICE_SID", "TWILIO_MESSAGING_SERVICE_SID"),
    )
    ALPHA_SENDER_NAME: str = "Sukaj SHPK"
    USE_ALPHANUMERIC_SENDER: bool = False
    TWILIO_STATUS_CALLBACK_URL: str = ""

    # Contract expiry notices (env: CONTRACT_EXPIRY_THRESHOLD_DAYS)
    CONTRACT_EXPIRY_THRESHOLD_DAYS: int = Field(default=30, description="Notify about contracts ending within this many days")

    # In-process rent-due cron (env: CRON_RENT_DUE_ENABLED, CRON_RENT_DUE_INTERVAL_HOURS, CRON_RENT_DUE_INITIAL_DELAY_SECONDS)
    CRON_RENT_DUE_ENABLED: bool = Field(default=False, description="Run rent-due SMS dispatch in the background")
    CRON_RENT_DUE_INTERVAL_HOURS: float = Field(default=24.0, description="Cron run interval in hours")
    CRON_RENT_DUE_INITIAL_DELAY_SECONDS: float = Field(default=10.0, description="Wait before the first cron run")

    class Config:
        extra = "ignore"
        env_file = str(ENV_PATH)
        env_file_encoding = "utf-8"


settings = Settings()
