from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = []
    store_timeout: float = 10.0  # Seconds to wait on a single store call before giving up

    model_config = {
        "env_file": [".env"],
        "env_prefix": "THREADBOARD_",
        "extra": "ignore",
    }
