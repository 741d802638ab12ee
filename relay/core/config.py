from typing import Annotated, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:9002",
    "https://higher.com.ng",
    "https://www.higher.com.ng",
]

DEFAULT_PAYMENT_LOGO_URL = (
    "https://firebasestorage.googleapis.com/v0/b/high-481fd.firebasestorage.app"
    "/o/logop.png?alt=media&token=22625ad4-b6ef-4623-a098-036843cddea3"
)


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="HIGH-ER Backend")
    app_description: str = Field(default="Course payment and enrollment relay")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="production")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # Client / CORS
    client_origin: str = Field(default="")
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=DEFAULT_CORS_ORIGINS
    )

    # Firebase
    firebase_service_account_path: Optional[str] = Field(default=None)
    firebase_service_account: Optional[str] = Field(default=None)
    firebase_local_credentials_file: str = Field(default="serviceAccountKey.json")
    firebase_storage_bucket: str = Field(default="")
    courses_collection: str = Field(default="basicCourses")
    enrollments_collection: str = Field(default="enrollments")

    # Payment (Flutterwave)
    flw_secret_key: str = Field(default="")
    flw_secret_hash: str = Field(default="")
    flw_base_url: str = Field(default="https://api.flutterwave.com/v3")
    payment_currency: str = Field(default="NGN")
    tx_ref_prefix: str = Field(default="BASIC")
    payment_redirect_path: str = Field(default="/basic/dashboard")
    payment_session_duration: int = Field(default=10)
    payment_max_retry_attempt: int = Field(default=5)
    payment_title: str = Field(default="HIGH-ER BASIC Training")
    payment_description: str = Field(
        default="Enrolling in HIGH-ER ENTERPRISES BASIC Course"
    )
    payment_logo_url: str = Field(default=DEFAULT_PAYMENT_LOGO_URL)

    # Email (Resend)
    resend_api_key: str = Field(default="")
    resend_api_url: str = Field(default="https://api.resend.com/emails")
    mail_from_address: str = Field(default="HIGH-ER <onboarding@resend.dev>")
    admin_email: str = Field(default="")

    # Receipt uploads
    max_receipt_size_mb: int = Field(default=10)
    allowed_receipt_types: Annotated[List[str], NoDecode] = Field(
        default=["jpg", "jpeg", "png", "webp", "pdf"]
    )

    # HTTP client
    http_timeout: float = Field(default=30.0)

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit: str = Field(default="20/minute")
    rate_limit_storage_uri: str = Field(default="memory://")

    # Logging
    log_level: str = Field(default="info")
    log_dir: str = Field(default="logs")

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, DEFAULT_CORS_ORIGINS)

    @field_validator("allowed_receipt_types", mode="before")
    def validate_receipt_types(cls, v):
        return cls._parse_csv(v, ["jpg", "jpeg", "png", "webp", "pdf"])

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allowed_origins(self) -> List[str]:
        origins = [self.client_origin] if self.client_origin else []
        return origins + [o for o in self.cors_allowed_origins if o not in origins]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
