from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./seedtrace.db"
    database_url_sync: str = "sqlite:///./seedtrace.db"
    auto_create_schema: bool = True  # create tables on startup (dev / SQLite)

    # Redis: optional read-through cache of short→full resolutions
    redis_url: str = "redis://localhost:6379/0"
    resolution_cache_enabled: bool = False
    resolution_cache_ttl: int = 86400  # mappings never change; 1 day bounds memory

    # Identifier engine
    default_requested_by: str = "SYSTEM"
    max_bulk_serials: int = 10000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "SEEDTRACE_"}


settings = Settings()
