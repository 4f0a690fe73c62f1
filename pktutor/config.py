from typing import Tuple

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: str = "data/warfarin.csv"
    missing_values: Tuple[str, ...] = (".",)
    lloq: float = 1.0  # mg/L
    reference_weight: float = 70.0  # kg
    volume_exponent: float = 1.0
    clearance_exponent: float = 0.75
    duplicate_time_offset: float = 1e-6  # h
    log_level: str = "INFO"

    class Config:
        env_prefix = "PKTUTOR_"
        env_file = ".env"


settings = Settings()
