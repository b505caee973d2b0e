from enum import Enum

from pydantic_settings import BaseSettings


# bcrypt refuses fewer rounds than this
MIN_WORK_FACTOR = 4


class Env(Enum):
    local = "local"
    dev = "dev"
    test = "test"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    db_url: str = "sqlite+aiosqlite:///dreamhost.db"
    secret_key: str = "secret-dev"
    bcrypt_work_factor: int = 12
    token_ttl: int = 60 * 60 * 24
    meal_base_url: str = "https://www.themealdb.com/api/json/v1/1/"
    drink_base_url: str = "https://www.thecocktaildb.com/api/json/v1/1/"
    log_level: str = "INFO"
    # JSON list in the env, e.g. CORS_ORIGINS='["https://dreamhost.example"]'
    cors_origins: list[str] = ["*"]

    @property
    def work_factor(self) -> int:
        if self.env == Env.test:
            return MIN_WORK_FACTOR
        return max(MIN_WORK_FACTOR, self.bcrypt_work_factor)
