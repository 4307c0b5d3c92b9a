import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("FILEFORGE_CONFIG", "config.toml")
_ENV_PATH = os.getenv("FILEFORGE_ENV", ".env")


class StorageSettings(BaseModel):
    backend: Literal["json", "database", "memory"] = "json"
    json_path: Path = Path("fileforge_storage.json")
    database_url: str = "sqlite:///fileforge.db"
    key: str = "files"  # Slot name the tree snapshot is stored under


class AuthSettings(BaseModel):
    password: str = "admin123"
    password_hash: Optional[str] = None  # Argon2 hash; takes precedence over password
    role: str = "admin"  # Role granted to a successfully authenticated user


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FILEFORGE_",
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
    )

    operation_latency: float = Field(default=0.5, ge=0)
    default_role: str = "admin"
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    logs_dir: Path = Field(default=Path("logs"))
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
