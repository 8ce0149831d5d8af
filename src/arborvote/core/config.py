"""Core configuration - centralized config for the arborvote package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from arborvote.core.config import get_config
    config = get_config()

    # Access settings
    log_level = config.log_level
    deposit = config.dispute_deposit
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings for ArborVote.

    Settings can be configured via environment variables using the
    ARBORVOTE_ prefix. Protocol constants (token grant, market liquidity,
    phase lengths) are not configurable and live in
    ``arborvote.debate.constants``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="ARBORVOTE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="ARBORVOTE_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="ARBORVOTE_LOG_FILE",
    )

    # ==========================================================================
    # STAKE TOKEN SETTINGS
    # ==========================================================================

    join_deposit: int = Field(
        default=0,
        ge=0,
        description="Stake token amount pulled from a participant on join (0 disables)",
        validation_alias="ARBORVOTE_JOIN_DEPOSIT",
    )
    dispute_deposit: int = Field(
        default=0,
        ge=0,
        description="Stake token amount pulled from a challenger when raising a dispute",
        validation_alias="ARBORVOTE_DISPUTE_DEPOSIT",
    )
    custody_account: str = Field(
        default="arborvote",
        description="Account that receives stake token deposits",
        validation_alias="ARBORVOTE_CUSTODY_ACCOUNT",
    )

    # ==========================================================================
    # TALLY SETTINGS
    # ==========================================================================

    tally_child_weight_percent: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Influence of an argument's children on its tallied score, in percent",
        validation_alias="ARBORVOTE_TALLY_CHILD_WEIGHT_PERCENT",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def deposits_enabled(self) -> bool:
        """Whether any operation pulls stake token deposits."""
        return self.join_deposit > 0 or self.dispute_deposit > 0


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
