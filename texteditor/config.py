from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

SYSTEM_VALUE_KEYS = ("html_preview_salt", "html_preview_prefix", "html_preview_domain")


class Settings(BaseSettings):
    app_name: str = "files-texteditor"
    app_env: str = "dev"
    log_level: str = "INFO"
    storage_dir: str = "data/users"
    database_path: str = "data/shares.db"
    max_edit_size_bytes: int = 4 * 1024 * 1024
    html_preview_salt: str | None = None
    html_preview_prefix: str | None = None
    html_preview_domain: str | None = None
    preview_token_ttl_seconds: int = 5 * 60
    default_preview_expiration: str = "2020-12-31 23:59:59"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TE_")

    def get_system_value(self, name: str) -> str | None:
        if name not in SYSTEM_VALUE_KEYS:
            return None
        return getattr(self, name) or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
