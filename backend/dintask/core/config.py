from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_extensions(v: Any) -> List[str]:
    """Parse allowed extensions from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [ext.strip().lower().lstrip('.') for ext in v.split(',') if ext.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "DinTask"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    TESTING: bool = False

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_ECHO: bool = False

    # ==========================================
    # Redis / Celery
    # ==========================================
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    CELERY_TASK_TIME_LIMIT: int = 1800
    CELERY_TASK_SOFT_TIME_LIMIT: int = 1500
    CELERY_RESULT_EXPIRES: int = 86400
    OVERDUE_CHECK_MINUTE: int = 0  # minute of every hour

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 43200  # 30 days
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)
    RESET_TOKEN_EXPIRE_MINUTES: int = 10

    # Root platform operator, created by the seed script
    SUPERADMIN_EMAIL: str = "superadmin@dintask.com"
    SUPERADMIN_PASSWORD: str = ""

    # ==========================================
    # Frontend URL (invites, password reset links)
    # ==========================================
    FRONTEND_URL: str = "http://localhost:5173"

    # ==========================================
    # Subscriptions
    # ==========================================
    DEFAULT_PLAN_DURATION_DAYS: int = 30

    # ==========================================
    # Payment Gateway
    # ==========================================
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    PAYMENT_CURRENCY: str = "INR"

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@dintask.com"
    EMAIL_FROM_NAME: str = "DinTask"

    # SendGrid Configuration (preferred when a key is present)
    SENDGRID_API_KEY: str = ""
    USE_SENDGRID: bool = True

    # ==========================================
    # Storage Configuration
    # ==========================================
    USE_MINIO: bool = True
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    S3_BUCKET_NAME: str = "dintask-uploads"
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_SECURE: bool = False
    STORAGE_PUBLIC_URL: str = ""  # CDN or bucket base; derived from the backend when empty
    UPLOAD_FOLDER: str = "dintask-uploads"

    # ==========================================
    # Push notifications (Firebase Cloud Messaging)
    # ==========================================
    FIREBASE_SERVICE_ACCOUNT_BASE64: str = ""

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_STORAGE_URL: str = "memory://"

    # ==========================================
    # File Upload
    # ==========================================
    MAX_UPLOAD_SIZE: int = 104857600  # 100MB (videos)
    MAX_REQUEST_SIZE: int = 104857600
    ALLOWED_EXTENSIONS_STR: str = "jpg,jpeg,png,gif,webp,mp4,webm,mov,avi"
    MAX_FILES_PER_UPLOAD: int = 5

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        return parse_extensions(self.ALLOWED_EXTENSIONS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    def get_reset_password_url(self, token: str) -> str:
        return f"{self.FRONTEND_URL}/reset-password/{token}"

    def get_invite_url(self, role: str, admin_id: str, email: str) -> str:
        return f"{self.FRONTEND_URL}/{role}/register?adminId={admin_id}&email={email}"


settings = Settings()
