"""
Configuration management for hwvault.

Settings come from environment variables (``HWVAULT_*``) and are validated
into a typed, immutable-after-validation model.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .datasets.registry import BUNDLED_DATA_DIR


class HwVaultConfig(BaseModel):
    """Runtime configuration for snapshot collection."""

    # ========================================================================
    # Datasets
    # ========================================================================

    dataset_dir: Path = Field(
        default=BUNDLED_DATA_DIR,
        description="Directory holding the JSON reference datasets"
    )

    # ========================================================================
    # Probing
    # ========================================================================

    probe_timeout: float = Field(
        default=15.0,
        gt=0,
        le=300,
        description="Seconds each component probe may run before it is abandoned"
    )

    default_memory_slots: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Slot count reported when neither the probe nor the modules disclose one"
    )

    # ========================================================================
    # Logging
    # ========================================================================

    log_level: str = Field(
        default="WARNING",
        description="Log level used by the command-line front end"
    )

    # ========================================================================
    # Validators
    # ========================================================================

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError('log_level must be DEBUG, INFO, WARNING, or ERROR')
        return v

    @field_validator('dataset_dir')
    @classmethod
    def validate_dataset_dir(cls, v):
        path = Path(v).expanduser()
        if not path.is_dir():
            raise ValueError(f'Dataset directory does not exist: {v}')
        return path

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )


def load_config(overrides: Optional[dict] = None) -> HwVaultConfig:
    """
    Load configuration from environment variables.

    Args:
        overrides: Values that take precedence over the environment
            (used by the CLI for explicit flags). ``None`` values are ignored.

    Returns:
        HwVaultConfig: Validated configuration

    Raises:
        pydantic.ValidationError: If a setting is invalid
    """
    config_dict = {}

    if os.environ.get('HWVAULT_DATASET_DIR'):
        config_dict['dataset_dir'] = os.environ['HWVAULT_DATASET_DIR']
    if os.environ.get('HWVAULT_PROBE_TIMEOUT'):
        config_dict['probe_timeout'] = os.environ['HWVAULT_PROBE_TIMEOUT']
    if os.environ.get('HWVAULT_DEFAULT_MEMORY_SLOTS'):
        config_dict['default_memory_slots'] = os.environ['HWVAULT_DEFAULT_MEMORY_SLOTS']
    if os.environ.get('HWVAULT_LOG_LEVEL'):
        config_dict['log_level'] = os.environ['HWVAULT_LOG_LEVEL']

    for key, value in (overrides or {}).items():
        if value is not None:
            config_dict[key] = value

    return HwVaultConfig(**config_dict)
