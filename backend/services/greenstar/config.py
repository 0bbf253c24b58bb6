from typing import List, Dict, Any, Union
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.logging_config import DEFAULT_LOG_FORMAT


def _split_csv(v, upper: bool = False) -> List[str]:
    if v is None or v == "":
        return ["*"]

    if isinstance(v, str):
        if v.strip() == "*":
            return ["*"]
        items = [item.strip() for item in v.split(',') if item.strip()]
    elif isinstance(v, list):
        items = [str(item).strip() for item in v if str(item).strip()]
    else:
        return ["*"]

    if upper:
        items = [item.upper() for item in items]
    return items or ["*"]


class GreenStarSettings(BaseSettings):
    """greenstar service configuration settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="GREENSTAR_"  # Environment variables prefixed with SERVICE_NAME_
    )

    # Service identity
    service_name: str = "greenstar-service"
    version: str = "1.0.0"
    calculator_version: str = "1.0.0"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8008
    api_workers: int = 1

    # CORS settings (use Union to handle different input types)
    cors_origins: Union[List[str], str] = "*"
    cors_allow_credentials: bool = True
    cors_allow_methods: Union[List[str], str] = "*"
    cors_allow_headers: Union[List[str], str] = "*"

    # Logging
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    # Project-level achievement cut points (fractions of the overall score)
    best_practice_cut: float = 0.85
    good_practice_cut: float = 0.60

    # Validation
    layer_cost_tolerance: float = 0.01  # fraction of total project cost
    high_cost_warning: float = 1_000_000

    # Formatting
    currency_code: str = "AUD"

    @field_validator('cors_origins', 'cors_allow_headers', mode='before')
    @classmethod
    def parse_cors_list(cls, v):
        return _split_csv(v)

    @field_validator('cors_allow_methods', mode='before')
    @classmethod
    def parse_cors_methods(cls, v):
        return _split_csv(v, upper=True)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level. Must be one of: {valid_levels}')
        return v.upper()

    @field_validator('layer_cost_tolerance')
    @classmethod
    def validate_tolerance(cls, v):
        if v < 0:
            raise ValueError("layer_cost_tolerance cannot be negative")
        return v

    @model_validator(mode='after')
    def validate_cut_points(self):
        if not 0.0 <= self.good_practice_cut <= self.best_practice_cut <= 1.0:
            raise ValueError(
                "Achievement cut points must satisfy 0 <= good_practice_cut <= best_practice_cut <= 1"
            )
        return self

    @property
    def achievement_cut_points(self) -> Dict[str, float]:
        """Overall-score cut points keyed by achievement level label"""
        return {
            "Best Practice": self.best_practice_cut,
            "Good Practice": self.good_practice_cut,
        }

    def get_api_config(self) -> Dict[str, Any]:
        return {
            "host": self.api_host,
            "port": self.api_port,
            "workers": self.api_workers,
        }


# Global settings instance
settings = GreenStarSettings()
