import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)


@dataclass(frozen=True)
class Settings:
    hasura_endpoint: str
    hasura_admin_secret: str
    jwt_secret: str
    jwt_expire_hours: int
    chapa_secret_key: str
    chapa_base_url: str
    currency: str
    base_url: str
    http_timeout: float
    log_level: str
    site_name: str
    contact_email: str
    support_phone: str
    platform_fee_percent: Decimal

    def callback_url(self, tx_ref: str) -> str:
        return f"{self.base_url}/api/chapa/verify/{tx_ref}"

    def return_url(self, tx_ref: str) -> str:
        return f"{self.base_url}/customer/order-confirmation?tx_ref={tx_ref}"


def validate_currency(value: Optional[str]) -> str:
    v = (value or "ETB").strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        hasura_endpoint=os.getenv("HASURA_ENDPOINT", ""),
        hasura_admin_secret=os.getenv("HASURA_ADMIN_SECRET", ""),
        jwt_secret=os.getenv("JWT_SECRET", "shoptube-jwt-secret"),
        jwt_expire_hours=int(os.getenv("JWT_EXPIRE_HOURS", "24")),
        chapa_secret_key=os.getenv("CHAPA_SECRET_KEY", ""),
        chapa_base_url=os.getenv("CHAPA_BASE_URL", "https://api.chapa.co/v1").rstrip("/"),
        currency=validate_currency(os.getenv("CURRENCY")),
        base_url=os.getenv("BASE_URL", "http://localhost:3000").rstrip("/"),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        site_name=os.getenv("SITE_NAME", "ShopTube"),
        contact_email=os.getenv("CONTACT_EMAIL", "contact@shoptube.com"),
        support_phone=os.getenv("SUPPORT_PHONE", "+1 (555) 123-4567"),
        platform_fee_percent=Decimal(os.getenv("PLATFORM_FEE_PERCENT", "5")),
    )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(level)
