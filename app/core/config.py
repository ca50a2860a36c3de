from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    APP_NAME: str = "Outfit Calendar API"
    APP_ENV: str = "dev"
    API_PREFIX: str = "/v1"
    CORS_ORIGINS: str = "*"
    # Auth (tokens are issued elsewhere, only decoded here)
    JWT_SECRET: str = "change_me"
    JWT_ALG: str = "HS256"
    # Remote calendar store
    CALENDAR_REPOSITORY: str = "memory"
    CALENDAR_API_BASE_URL: str = "http://localhost:8080/api"
    CALENDAR_API_TIMEOUT_S: float = 30.0
    # Scheduling
    CALENDAR_TZ: str = "Europe/London"
    GAP_DAY_WINDOW_DEFAULT: int = 2
    DAY_VISIBLE_LIMIT: int = 3

    @property
    def cors_origin_list(self) -> List[str]:
        val = self.CORS_ORIGINS
        if not val: return []
        if val == "*": return ["*"]
        return [v.strip() for v in val.split(",")]

settings = Settings()
