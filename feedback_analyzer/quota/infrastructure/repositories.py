"""
Quota Infrastructure Repositories
=================================

Loads quota limits from YAML.
"""

from pathlib import Path
from typing import Optional, Union

import yaml

from feedback_analyzer.core import ConfigurationException
from feedback_analyzer.quota.application.services import IQuotaConfigProvider
from feedback_analyzer.quota.domain import QuotaConfig, QuotaLimitConfig, DEFAULT_QUOTA_LIMITS
from feedback_analyzer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class YAMLQuotaConfigProvider(IQuotaConfigProvider):
    """
    Quota configuration provider that loads from YAML.

    Expected layout:

        limits:
          ai-tokens:
            window: daily
            hard_limit: 100000
            reserved_margin: 10000

    A missing file yields the defaults; per-class fields left out of the
    file are taken from the defaults for that class.
    """

    def __init__(self, config_path: Union[str, Path]):
        self._config_path = Path(config_path)
        self._config: Optional[QuotaConfig] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.info(
                "Quota config file not found, using defaults",
                extra={"config_path": str(self._config_path)}
            )
            self._config = QuotaConfig()
            return

        try:
            with open(self._config_path, "r") as f:
                data = yaml.safe_load(f) or {}

            limits = {
                resource_class: QuotaLimitConfig(
                    **{**DEFAULT_QUOTA_LIMITS.get(resource_class, {}), **(values or {})}
                )
                for resource_class, values in (data.get("limits") or {}).items()
            }
            self._config = QuotaConfig(limits=limits)
        except (yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            raise ConfigurationException(
                f"Invalid quota config {self._config_path}: {e}",
                details={"config_path": str(self._config_path)}
            )

    def get_config(self) -> QuotaConfig:
        """Get current quota configuration."""
        return self._config

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
