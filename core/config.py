"""
Ripple -- Configuration Models

Pydantic models for the wave parameters and runtime settings.
Defaults reproduce the classic look: a fast, tightly damped ripple.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_IMAGE_URL = "https://picsum.photos/seed/shadertoyripple/600/400"
MAX_DIMENSION = 600


class RippleParameters(BaseModel):
    """Wave constants, fixed for the lifetime of the process."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    amplitude: float = Field(0.05, ge=0.0)   # Displacement, normalized units
    frequency: float = 15.0                  # Oscillation rate (rad/s of local time)
    decay: float = Field(8.0, ge=0.0)        # Exponential damping rate
    speed: float = Field(2.0, gt=0.0)        # Propagation, normalized units/s

    @field_validator("amplitude", "frequency", "decay", "speed")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("NaN/Inf not allowed")
        return v


class RippleConfig(BaseModel):
    """Runtime settings: wave parameters plus output and driver options."""
    model_config = ConfigDict(extra="forbid")

    params: RippleParameters = Field(default_factory=RippleParameters)
    max_dimension: int = Field(MAX_DIMENSION, gt=0, le=8192)
    fps: int = Field(60, ge=1, le=240)
    workers: int = Field(1, ge=1, le=64)
    default_image: str = DEFAULT_IMAGE_URL
    recenter_on_leave: bool = False
    request_timeout: float = Field(10.0, gt=0.0)


def load_config(path) -> RippleConfig:
    """Load a RippleConfig from JSON.

    Accepts either the config object itself or ``{"ripple": {...}}``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If values are out of range.
    """
    path = Path(path)
    data = json.loads(path.read_text())
    if isinstance(data, dict) and "ripple" in data:
        data = data["ripple"]
    return RippleConfig.model_validate(data)
