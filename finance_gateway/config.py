"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finance.db"

    # Service
    service_name: str = "finance-gateway"
    log_level: str = "INFO"

    # Money
    default_currency: str = "USD"

    # Installment plans
    min_installments: int = 2
    max_installments: int = 60

    # Payment sessions
    max_payment_sessions: int = 1000

    # Dashboard
    burndown_months: int = 6
    top_expenses_limit: int = 5
    cash_flow_days: int = 30


settings = Settings()
