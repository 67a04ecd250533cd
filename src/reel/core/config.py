"""Engine configuration with environment overrides."""

import logging
import os
from pydantic import BaseModel, Field

logger = logging.getLogger("ReelMCP.core.config")

# Default configuration
DEFAULT_TICK_PERIOD = 0.1
DEFAULT_FADE_WINDOW = 0.5
DEFAULT_EXPORT_STEP = 10
DEFAULT_EXPORT_STEP_DELAY = 0.5
DEFAULT_MAX_IMAGES = 5
DEFAULT_SLIDE_DURATION = 3.0

MIN_SLIDE_DURATION = 1.0
MAX_SLIDE_DURATION = 10.0
DURATION_STEP = 0.5


class EngineConfig(BaseModel):
    """Timing and limit settings shared by the store, player and exporter."""
    tick_period: float = Field(default=DEFAULT_TICK_PERIOD, gt=0)
    fade_window: float = Field(default=DEFAULT_FADE_WINDOW, ge=0)
    export_step: int = Field(default=DEFAULT_EXPORT_STEP, gt=0, le=100)
    export_step_delay: float = Field(default=DEFAULT_EXPORT_STEP_DELAY, ge=0)
    max_images: int = Field(default=DEFAULT_MAX_IMAGES, ge=0)
    default_duration: float = Field(
        default=DEFAULT_SLIDE_DURATION,
        ge=MIN_SLIDE_DURATION,
        le=MAX_SLIDE_DURATION,
    )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from REEL_* environment variables.

        Unset variables keep their defaults.
        """
        overrides = {}
        env_map = {
            "REEL_TICK_PERIOD": ("tick_period", float),
            "REEL_FADE_WINDOW": ("fade_window", float),
            "REEL_EXPORT_STEP": ("export_step", int),
            "REEL_EXPORT_STEP_DELAY": ("export_step_delay", float),
            "REEL_MAX_IMAGES": ("max_images", int),
            "REEL_DEFAULT_DURATION": ("default_duration", float),
        }
        for env_name, (field_name, cast) in env_map.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            overrides[field_name] = cast(raw)
            logger.info(f"Config override {env_name}={raw}")
        return cls(**overrides)
