"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from brew_conductor.domain.enums import TriggerInput


class Settings(BaseSettings):
    app_name: str = "brew-conductor"
    debug: bool = False
    log_level: str = "INFO"

    # Signal smoothing
    smoothing_alpha_temp: float = 0.2
    smoothing_alpha_rate: float = 0.3

    # Trigger evaluation
    rearm_interval_seconds: float = 60.0
    trigger_input: TriggerInput = TriggerInput.SMOOTHED

    # Startup
    load_sample_recipe: bool = False

    model_config = {"env_prefix": "BREW_"}


settings = Settings()
