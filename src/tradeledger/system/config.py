"""
System configuration for TradeLedger.

One YAML file configures the whole backend. Every section has built-in
defaults, so a partial (or missing) file is valid.

Lookup order for the config path:
1. Explicit path passed to SystemConfig.load()
2. TRADELEDGER_CONFIG environment variable
3. config/tradeledger.yaml

Values may reference environment variables as ${VAR}; undefined variables
keep their placeholder.

Example file:
    wallet:
      initial_balance: "10000"
    quotes:
      provider: yahoo
      timeout_seconds: 5
    api:
      port: 8000
    logging:
      level: INFO
"""

import os
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from tradeledger.system.log_system import LoggingConfig as LoggerConfig

DEFAULT_CONFIG_PATH = Path("config/tradeledger.yaml")
CONFIG_ENV_VAR = "TRADELEDGER_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class WalletSettings:
    """Wallet provisioning settings."""

    initial_balance: Decimal = Decimal("10000")

    def __post_init__(self) -> None:
        self.initial_balance = Decimal(str(self.initial_balance))
        if self.initial_balance < 0:
            raise ValueError(f"initial_balance must be >= 0, got {self.initial_balance}")


@dataclass
class QuoteSettings:
    """Quote provider selection.

    Attributes:
        provider: "yahoo" (live, via yfinance) or "static" (fixed prices)
        timeout_seconds: Deadline for a single quote lookup
        static_prices: Symbol -> price map used by the static provider
        default_symbols: Symbols served by /api/stocks/quotes when none are given
    """

    provider: str = "yahoo"
    timeout_seconds: float = 5.0
    static_prices: dict[str, Decimal] = field(default_factory=dict)
    default_symbols: list[str] = field(default_factory=lambda: ["AAPL", "GOOGL", "MSFT", "AMZN", "META"])

    def __post_init__(self) -> None:
        if self.provider not in ("yahoo", "static"):
            raise ValueError(f"quotes.provider must be 'yahoo' or 'static', got '{self.provider}'")
        if self.timeout_seconds <= 0:
            raise ValueError(f"quotes.timeout_seconds must be positive, got {self.timeout_seconds}")
        self.static_prices = {str(k).upper(): Decimal(str(v)) for k, v in self.static_prices.items()}
        self.default_symbols = [str(s).strip().upper() for s in self.default_symbols if str(s).strip()]


@dataclass
class ApiSettings:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    user_header: str = "X-User-Id"


@dataclass
class LoggingConfig:
    """Logging section (converted to log_system.LoggingConfig at startup)."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = True
    file_path: str = "logs/tradeledger.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the pydantic model consumed by LoggerFactory."""
        return LoggerConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    wallet: WalletSettings = field(default_factory=WalletSettings)
    quotes: QuoteSettings = field(default_factory=QuoteSettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, falling back to defaults.

        Args:
            path: Config file path. If None, uses TRADELEDGER_CONFIG or the default path.

        Returns:
            SystemConfig with file values merged over defaults
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
        path = Path(path)

        data: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        merged = _deep_merge(_defaults_dict(), data)
        return cls(
            wallet=WalletSettings(**merged["wallet"]),
            quotes=QuoteSettings(**merged["quotes"]),
            api=ApiSettings(**merged["api"]),
            logging=LoggingConfig(**merged["logging"]),
        )


def _defaults_dict() -> dict[str, Any]:
    """Default values for every section, as plain dicts."""
    return {
        "wallet": {"initial_balance": WalletSettings().initial_balance},
        "quotes": {
            "provider": QuoteSettings().provider,
            "timeout_seconds": QuoteSettings().timeout_seconds,
            "static_prices": {},
            "default_symbols": QuoteSettings().default_symbols,
        },
        "api": dict(ApiSettings().__dict__),
        "logging": dict(LoggingConfig().__dict__),
    }


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base. Override wins on conflicts."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} placeholders in strings, recursing into dicts and lists."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """
    Get the cached system configuration.

    Passing an explicit path always loads (and caches) that file.
    """
    global _system_config
    if path is not None:
        _system_config = SystemConfig.load(path)
    elif _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
