import os
from typing import Optional, List
from functools import lru_cache


class Settings:
    """Application settings read from the environment"""

    # Database (Postgres)
    DB_DSN: str = os.getenv("DB_DSN", "")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    # Runtime
    ENVIRONMENT: str = os.getenv("NODE_ENV", os.getenv("ENVIRONMENT", "production"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ENABLE_TEST_MODE: bool = os.getenv("ENABLE_TEST_MODE", "false").lower() == "true"

    # CORS
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Rate Limiting
    RATE_LIMIT_WINDOW_MINUTES: int = int(os.getenv("RATE_LIMIT_WINDOW_MINUTES", "15"))
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))

    # WordPress / ACF content store
    WORDPRESS_API_URL: str = os.getenv("WORDPRESS_API_URL", "https://immersivetrips.in/wp-json")
    WORDPRESS_API_TIMEOUT: float = float(os.getenv("WORDPRESS_API_TIMEOUT", "10"))
    WORDPRESS_API_KEY: str = os.getenv("WORDPRESS_API_KEY", "")

    # Departure schedule defaults
    SCHEDULE_DEFAULT_LOCATION: str = os.getenv("SCHEDULE_DEFAULT_LOCATION", "India")
    SCHEDULE_DEFAULT_DURATION: str = os.getenv("SCHEDULE_DEFAULT_DURATION", "7 Days / 6 Nights")
    SCHEDULE_DEFAULT_CURRENCY: str = os.getenv("SCHEDULE_DEFAULT_CURRENCY", "INR")
    SCHEDULE_MIN_TRAVELERS: int = int(os.getenv("SCHEDULE_MIN_TRAVELERS", "1"))
    SCHEDULE_MAX_TRAVELERS: int = int(os.getenv("SCHEDULE_MAX_TRAVELERS", "30"))

    # Payments
    PAYMENT_MODE: str = os.getenv("PAYMENT_MODE", "HDFC").upper()
    HDFC_BASE_URL: str = os.getenv("HDFC_BASE_URL", "https://smartgatewayuat.hdfcbank.com")
    HDFC_API_KEY: str = os.getenv("HDFC_API_KEY", "")
    HDFC_MERCHANT_ID: str = os.getenv("HDFC_MERCHANT_ID", "")
    HDFC_PAYMENT_PAGE_CLIENT_ID: str = os.getenv("HDFC_PAYMENT_PAGE_CLIENT_ID", "")
    HDFC_RESPONSE_KEY: str = os.getenv("HDFC_RESPONSE_KEY", "")
    RAZORPAY_KEY_ID: str = os.getenv("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET: str = os.getenv("RAZORPAY_KEY_SECRET", "")
    BANK_ACCOUNT_NAME: str = os.getenv("BANK_ACCOUNT_NAME", "Immersive Trips")

    # Email
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_SECURE: bool = os.getenv("SMTP_SECURE", "false").lower() == "true"
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    COMPANY_NAME: str = os.getenv("COMPANY_NAME", "Immersive Trips")
    SITE_URL: str = os.getenv("SITE_URL", "https://immersivetrips.in")
    SUPPORT_EMAIL: str = os.getenv("SUPPORT_EMAIL", "info@immerseindiatours.com")
    SUPPORT_PHONE: str = os.getenv("SUPPORT_PHONE", "+(91) 971 199 2099")

    # Admin API
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

    def __init__(self):
        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.DB_DSN:
            raise ValueError("DB_DSN environment variable must be set")
        if self.SCHEDULE_MIN_TRAVELERS > self.SCHEDULE_MAX_TRAVELERS:
            raise ValueError("SCHEDULE_MIN_TRAVELERS cannot exceed SCHEDULE_MAX_TRAVELERS")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS") or self.FRONTEND_URL

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def rate_limit(self) -> str:
        """slowapi limit string, e.g. ``100/15 minutes``"""
        return f"{self.RATE_LIMIT_MAX_REQUESTS}/{self.RATE_LIMIT_WINDOW_MINUTES} minutes"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.EMAIL_FROM)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
