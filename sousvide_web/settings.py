from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration, overridable through SOUSVIDE_* environment variables."""
    model_config = SettingsConfigDict(env_prefix="SOUSVIDE_")

    settings_file: str = "settings.json"
    http_host: str = "0.0.0.0"
    http_port: int = 5000
    debug: bool = False
    log_level: str = "INFO"
    stream_interval: float = 1.0  # seconds between WebSocket status pushes

settings = Settings()
