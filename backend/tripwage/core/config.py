from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tripwage.services.wages import WageConstants


BackendName = Literal["A", "B"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    # Backend B (relational). The sqlite default keeps a fresh checkout runnable.
    database_url: str = Field(
        default="sqlite+pysqlite:///./tripwage.db",
        validation_alias="DATABASE_URL",
    )
    auto_create_tables: bool = Field(
        default=True,
        validation_alias="AUTO_CREATE_TABLES",
    )

    # Backend A (document store).
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )
    redis_prefix: str = Field(
        default="tripwage",
        validation_alias="REDIS_PREFIX",
    )

    backend_selection: Literal["A", "B", "dual"] = Field(
        default="B",
        validation_alias="BACKEND_SELECTION",
    )
    read_primary: BackendName = Field(
        default="B",
        validation_alias="READ_PRIMARY",
    )

    base_hourly_rate: float = Field(default=8.5, validation_alias="BASE_HOURLY_RATE")
    fuel_per_order: float = Field(default=3.5, validation_alias="FUEL_PER_ORDER")
    long_trip_threshold_km: float = Field(default=10.0, validation_alias="LONG_TRIP_THRESHOLD_KM")
    long_trip_extra_fuel: float = Field(default=3.5, validation_alias="LONG_TRIP_EXTRA_FUEL")

    jwt_secret_key: str = Field(
        default="change-me",
        validation_alias="JWT_SECRET_KEY",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        validation_alias="JWT_ALGORITHM",
    )
    access_token_exp_minutes: int = Field(
        default=60 * 24 * 30,
        validation_alias="ACCESS_TOKEN_EXP_MINUTES",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    cors_origins: list[str] = Field(
        default=[
            "http://127.0.0.1:3000",
            "http://localhost:3000",
        ],
        validation_alias="CORS_ORIGINS",
    )

    @property
    def wage_constants(self) -> WageConstants:
        return WageConstants(
            base_hourly_rate=self.base_hourly_rate,
            fuel_per_order=self.fuel_per_order,
            long_trip_threshold_km=self.long_trip_threshold_km,
            long_trip_extra_fuel=self.long_trip_extra_fuel,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
