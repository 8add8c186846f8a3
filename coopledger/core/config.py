from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Find .env file - check coopledger/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "coopledger" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use coopledger/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'coop_ledger.db'}"

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # PIN gate (plain 4-digit PIN or a bcrypt hash of it)
    ADMIN_PIN: str = "2025"

    # Society
    SOCIETY_NAME: str = "NYSC KATSINA STATE STAFF MULTI-PURPOSE COOPERATIVE SOCIETY LIMITED"
    CURRENCY_SYMBOL: str = "₦"
    DIVIDEND_YIELD_RATE: float = 0.05
    DEFAULT_INTEREST_RATE: float = 5
    DEFAULT_LOAN_DURATION_MONTHS: int = 6

    # AI
    GROQ_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    EXTRACTION_MODEL: str = "gpt-4o-mini"

    # Feature Flags
    ENABLE_AI_CHAT: bool = True
    ENABLE_DOCUMENT_UPLOAD: bool = True

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = BASE_DIR / "logs"
