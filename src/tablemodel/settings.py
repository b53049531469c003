from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Configuration settings backed by environment variables."""

    database_url: Optional[str] = Field(
        default=None,
        validation_alias="TABLEMODEL_DATABASE_URL",
        description="SQLAlchemy URL used by create_gateway() when no URL is given."
    )
    table_prefix: str = Field(
        default="",
        validation_alias="TABLEMODEL_TABLE_PREFIX",
        description="Prefix prepended to every bare table name."
    )
    db_charset: str = Field(
        default="utf8mb4",
        validation_alias="TABLEMODEL_DB_CHARSET",
        description="Default character set used in MySQL table DDL."
    )
    db_collate: str = Field(
        default="utf8mb4_unicode_ci",
        validation_alias="TABLEMODEL_DB_COLLATE",
        description="Default collation used in MySQL table DDL."
    )

    log_level: str = Field(default="INFO", validation_alias="TABLEMODEL_LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="TABLEMODEL_LOG_JSON")
    configure_logging: bool = Field(
        default=False,
        validation_alias="TABLEMODEL_CONFIGURE_LOGGING",
        description="Configure the root logger when the package is imported."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


settings = Settings()

if settings.configure_logging:
    from tablemodel.logger import configure_logging
    configure_logging(level=settings.log_level, json_format=settings.log_json)
