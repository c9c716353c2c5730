"""
System package: configuration and logging shared by every service.

Exports:
    - SystemConfig: Complete system configuration dataclass
    - get_system_config: Cached system config
    - reload_system_config: Force reload system config
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
    - bind_request_context / clear_request_context: Per-request log fields
"""

from tradeledger.system.config import SystemConfig, get_system_config, reload_system_config
from tradeledger.system.log_system import LoggerFactory, LoggingConfig, bind_request_context, clear_request_context

__all__ = [
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
    "bind_request_context",
    "clear_request_context",
]
