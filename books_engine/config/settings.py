from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from process + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env",),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="local", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="books_engine", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Organization master data
    ORGANIZATION_STATE: str = Field(
        default="",
        validation_alias=AliasChoices("ORGANIZATION_STATE", "organization_state"),
    )

    # Calculation
    MONEY_DECIMAL_PLACES: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("MONEY_DECIMAL_PLACES", "money_decimal_places"),
    )
    DEFAULT_DOCUMENT_POLICY: str = Field(
        default="bill",
        validation_alias=AliasChoices("DEFAULT_DOCUMENT_POLICY", "default_document_policy"),
    )


settings = Settings()
