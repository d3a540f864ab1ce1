"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DEALDESK_", extra="ignore"
    )

    # Service
    service_name: str = "dealdesk-gateway"
    log_level: str = "INFO"

    # Dealer defaults applied when a request omits its own settings
    default_state: str = "MI"
    default_doc_fee: float = 250.0
    default_cvr_fee: float = 25.0
    default_state_fees: float = 200.0
    default_out_of_state_transit_fee: float = 15.0
    default_custom_tax_rate: float | None = None  # percent
    default_term: int = 60
    default_apr: float = 7.99

    # LTV display thresholds (percent)
    ltv_warn: float = 115.0
    ltv_danger: float = 125.0
    ltv_critical: float = 135.0

    # Lender matching fan-out; 1 keeps evaluation sequential
    eligibility_max_workers: int = 1


settings = Settings()
