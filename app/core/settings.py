from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.db.url import build_database_url, normalize_database_url


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="postgres", alias="DB_PASSWORD")
    db_name: str = Field(default="screensaver_ad", alias="DB_NAME")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    aws_region: str | None = Field(default=None, alias="AWS_REGION")
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    aws_s3_bucket: str | None = Field(default=None, alias="AWS_S3_BUCKET")

    allowed_origins_csv: str = Field(default="*", alias="ALLOWED_ORIGINS")
    rate_limit_per_minute: int = Field(default=120, alias="RATE_LIMIT_PER_MINUTE")
    rate_limit_storage_uri: str = Field(default="memory://", alias="RATE_LIMIT_STORAGE_URI")

    default_url_ttl_minutes: int = Field(default=60, alias="DEFAULT_URL_TTL_MINUTES")
    template_url_ttl_minutes: int = Field(default=15, alias="TEMPLATE_URL_TTL_MINUTES")
    webhook_marks_processed: bool = Field(default=False, alias="WEBHOOK_MARKS_PROCESSED")

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins_csv.split(",") if origin.strip()]

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return normalize_database_url(self.database_url)
        return build_database_url(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            name=self.db_name,
        )

    @property
    def object_store_configured(self) -> bool:
        # Partial AWS configuration leaves uploads disabled rather than failing startup.
        return all(
            (
                self.aws_region,
                self.aws_access_key_id,
                self.aws_secret_access_key,
                self.aws_s3_bucket,
            )
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
