"""Environment configuration registry for the owner sync CDK app."""

from typing import Dict

from infrastructure.config.types import EnvironmentConfig

from .dev import dev_config
from .staging import staging_config
from .prod import prod_config

_CONFIGS: Dict[str, EnvironmentConfig] = {
    "dev": dev_config,  # type: ignore[dict-item]
    "staging": staging_config,  # type: ignore[dict-item]
    "prod": prod_config,  # type: ignore[dict-item]
}


def get_environment_config(environment: str) -> EnvironmentConfig:
    """Return a copy of the configuration for the given environment."""
    if environment not in _CONFIGS:
        raise ValueError(f"Unknown environment: {environment} (expected one of {sorted(_CONFIGS)})")
    return EnvironmentConfig(**_CONFIGS[environment])
