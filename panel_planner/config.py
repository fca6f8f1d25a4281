from pydantic_settings import BaseSettings
from functools import lru_cache
from pydantic import Field


class Settings(BaseSettings):
    app_name: str = "Overhead Panel Planner"
    debug: bool = True
    env: str = "development"

    # PostgreSQL
    postgres_user: str = "panel"
    postgres_password: str = "changeme"
    postgres_db: str = "overhead_panel"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    database_url_override: str | None = Field(default=None, alias="DATABASE_URL")
    auto_migrate_on_startup: bool = False

    # PSU fallback when no psu_config row exists
    default_psu_capacity_watts: float = 350.0
    default_converter_efficiency: float = Field(default=0.87, gt=0, le=1)

    # Always-on logic current per board, drawn from the 5V rail
    board_logic_current_ma: float = 100.0
    mosfet_board_logic_current_ma: float = 30.0

    # Dimensions assumed for a freshly added Arduino Mega
    new_board_digital_pins: int = 54
    new_board_analog_pins: int = 16

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
