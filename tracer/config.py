from pydantic_settings import BaseSettings

from tracer.schemas.trace import DEFAULT_TRACE_ID_HEADER


class Settings(BaseSettings):
    header_name: str = DEFAULT_TRACE_ID_HEADER
    environment: str = "development"
    log_level: str = "INFO"
    json_logs: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "TRACER_"


settings = Settings()
