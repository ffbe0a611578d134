from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "WardFlow"
    environment: str = "dev"
    log_level: str = "INFO"

    # unset means the snapshot cache only lives as long as the process
    cache_path: Optional[Path] = None

    # start from the demo ward census instead of an empty store
    seed_defaults: bool = True

    # False reproduces the old behaviour where clinical syncs reopen a discharged record
    sticky_discharge: bool = True

    model_config = SettingsConfigDict(env_prefix="WARDFLOW_", env_file=".env", extra="ignore")


settings = Settings()
