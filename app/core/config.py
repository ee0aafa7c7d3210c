import json
from typing import Annotated, ClassVar, cast

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


PROJECT_NAME = "Jenkins CI/CD Demo API"
VERSION = "1.0.0"


class Settings(BaseSettings):
    API_PREFIX: str = "/api"

    # Deployment environment name, NODE_ENV kept for existing pipelines
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )
    DEBUG: bool = False

    # Listener
    LISTEN_HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS configuration
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    # Maximum accepted size of a parsed request body, in bytes
    BODY_LIMIT: int = 100 * 1024

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: object) -> list[str]:
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("[") and s.endswith("]"):
                try:
                    parsed_obj: object = cast(object, json.loads(s))
                    if isinstance(parsed_obj, list):
                        data_list: list[object] = cast(list[object], parsed_obj)
                        return [str(i).strip() for i in data_list]
                except ValueError:
                    # Fallback to comma-separated parsing
                    return [i.strip() for i in s.strip("[]").split(",") if i.strip()]
            return [i.strip() for i in s.split(",") if i.strip()]
        elif isinstance(v, list):
            v_list: list[object] = cast(list[object], v)
            return [str(i).strip() for i in v_list]
        raise ValueError(str(v))

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def LOG_LEVEL(self) -> str:
        return "DEBUG" if self.DEBUG else "INFO"

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )


def load_settings() -> Settings:
    """Read the process environment (and `.env`) once at start-up."""
    return Settings()
