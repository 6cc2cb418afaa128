from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    backend: str = "local"   # "supabase" | "local"
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    request_timeout: float = 30.0
    database_url: str = "sqlite:///./rfi_tracker.db"
    secret_key: Optional[str] = None   # required by the local backend
    sql_echo: bool = False
    backend_cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.backend_cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
