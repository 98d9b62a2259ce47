"""
Configuration Validation
========================
Pydantic schemas for the tunable numerical settings of the propagation
engine.

Key Principle: Fail fast on bad configs. A typo in a config should raise an
immediate, clear error - not silently produce wrong results.
"""

import json
from pathlib import Path
from typing import Dict, Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class PropagationConfig(BaseModel):
    """Numerical settings for uncertainty propagation."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    default_samples: int = Field(10000, ge=1, description="Default Monte Carlo trial count")
    min_samples: int = Field(100, ge=1, description="Smallest accepted Monte Carlo trial count")
    step_size: float = Field(1e-8, gt=0, lt=1, description="Relative finite-difference step")
    correlation_threshold: float = Field(
        0.1, ge=0, le=1,
        description="Correlations with |rho| at or below this are ignored when sampling",
    )
    contribution_sample_limit: int = Field(
        1000, ge=2, description="Trials retained for Monte Carlo contribution analysis",
    )

    @model_validator(mode='after')
    def check_sample_counts(self):
        if self.default_samples < self.min_samples:
            raise ValueError(
                f"default_samples ({self.default_samples}) must be >= "
                f"min_samples ({self.min_samples})"
            )
        return self


DEFAULT_PROPAGATION_CONFIG = PropagationConfig()


def validate_config(config: Dict[str, Any]) -> PropagationConfig:
    """
    Validate a propagation configuration dictionary.

    Args:
        config: Configuration dictionary (missing keys take defaults)

    Returns:
        Validated PropagationConfig

    Raises:
        ValueError: If validation fails with detailed error message
    """
    try:
        return PropagationConfig(**config)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed:\n{str(e)}") from e


def load_config(path: Union[str, Path]) -> PropagationConfig:
    """
    Load and validate a JSON configuration file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the JSON is malformed or validation fails
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {str(e)}") from e

    return validate_config(data)
