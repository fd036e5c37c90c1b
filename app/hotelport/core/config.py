from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "HOTELPORT"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite+pysqlite:///./hotelport.db"
    SUPERADMIN_ROLE_NAME: str = "Super Admin"
    SUPERADMIN_EMAIL: str = "superadmin@example.com"
    SUPERADMIN_PASSWORD: str = "change-me"
    PENDING_ACTIONS_DEFAULT_PAGE_SIZE: int = 10
    PENDING_ACTIONS_MAX_PAGE_SIZE: int = 100
    METRICS_ENABLED: bool = True
    NOTIFICATIONS_ENABLED: bool = True
    NOTIFICATION_WEBHOOK_URL: str = ""
    NOTIFICATION_WEBHOOK_TIMEOUT_SEC: int = 10
    SMTP_HOST: str = ""
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    SMTP_FROM: str = ""

settings = Settings()
