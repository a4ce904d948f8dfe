# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Runtime configuration for batch planning.

Values are read from ``BATCHALCHEMY_*`` environment variables or a ``.env``
file; keyword arguments passed to the planner or session override them per call.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BatchConstants


class BatchSettings(BaseSettings):
    """
    Batch planning options.

    :ivar batch_size: Rows per executed batch
    :ivar rewrite_batch_inserts: Merge single-row inserts into multi-row statements
    :ivar rewritten_insert_size: Rows merged into one statement when rewriting
    :ivar fan_out_below_version: Oracle major versions below this use INSERT ALL
    """

    batch_size: int = Field(default=BatchConstants.DEFAULT_BATCH_SIZE, ge=1)
    rewrite_batch_inserts: bool = BatchConstants.DEFAULT_REWRITE_BATCH_INSERTS
    rewritten_insert_size: int = Field(default=BatchConstants.DEFAULT_REWRITTEN_INSERT_SIZE, ge=1)
    fan_out_below_version: int = Field(default=BatchConstants.DEFAULT_FAN_OUT_BELOW_VERSION, ge=0)

    model_config = SettingsConfigDict(
        env_prefix=BatchConstants.SETTINGS_ENV_PREFIX,
        env_file=".env",
        extra="ignore",
    )


_settings: Optional[BatchSettings] = None


def get_settings() -> BatchSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = BatchSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
