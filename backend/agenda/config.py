from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_ENV: str = "dev"
    SECRET_KEY: str
    JWT_EXPIRES_MIN: int = 1440
    LOG_LEVEL: str = "INFO"

    # DB
    DB_URL: str
    DB_SLOW_QUERY_THRESHOLD: float = 1.0  # segundos; 0 desactiva el log de queries lentas

    # Zona horaria usada para resolver los alias "today"/"tomorrow" (hoy/mañana)
    TIMEZONE: str = "America/Mexico_City"

    # Límites "sanos" para la fecha pedida a /availability
    AVAILABILITY_MAX_PAST_DAYS: int = 30
    AVAILABILITY_MAX_FUTURE_DAYS: int = 730


settings = Settings()
