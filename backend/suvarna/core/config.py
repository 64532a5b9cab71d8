from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "dev"
    database_url: str = "postgresql+psycopg2://suvarna:suvarna@db:5432/suvarna"
    log_level: str = "INFO"

    # External price feed; the static quotations are used when no URL is set
    rate_feed_url: Optional[str] = None
    rate_feed_api_key: Optional[str] = None
    rate_feed_timeout_seconds: float = 10.0

    # Active rates older than this are reported as needing a refresh
    rate_max_age_minutes: int = 60

    default_gst_percent: Decimal = Decimal("3")
    invoice_prefix: str = "INV"

    @property
    def uses_static_feed(self) -> bool:
        return not self.rate_feed_url

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
