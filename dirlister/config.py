from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='DIRLISTER_', env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'Directory Lister'
    app_host: str = '0.0.0.0'
    app_port: int = Field(default=8000, ge=1, le=65535)
    storage_root: str = '../storage'
    root_label: str = Field(default='storage', min_length=1)
    log_level: str = 'info'


settings = Settings()
