"""Structured logging for TradeLedger (structlog over stdlib logging).

Console lines are rendered per event family:
    portfolio.buy.executed   -> BUY  AAPL 10 @ 150.00 | avg 150.00 | bal 8,500.00
    forex.trade.closed       -> FX CLOSE EUR/USD 1.20000 -> 1.30000 | P&L +100.00
    wallet.*                 -> WALLET deposit +500.00 | bal 10,500.00
everything else falls back to "event | key=value ... (module:line)".

Request-scoped fields (request id, user, path) are bound with
bind_request_context() and merged into every event logged while the
request is handled.
"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LOG_FILE = Path("logs/tradeledger.log")

# Keys added by the processor chain rather than by the caller
_META_KEYS = ("log_timestamp", "level", "event", "filename", "lineno", "logger")


class LoggingConfig(BaseModel):
    """Configuration for logging system.

    What each level carries:

    INFO (default):
    - Executed buys and sells, forex opens and closes
    - Deposits, withdrawals, balance overwrites, wallet provisioning
    - API startup

    DEBUG:
    - Service wiring
    - Quote lookups and store commits

    WARNING:
    - Rejected operations (insufficient balance or quantity, unknown trade)
    - Quote provider timeouts and failures
    - Version conflicts on commit

    ERROR:
    - Unexpected exceptions returned to clients as HTTP 500

    Timestamp formats:
    - "iso": 2025-10-22T20:50:07.288824+00:00
    - "compact": 251022-205007.28 (YYMMDD-HHMMSS.cs)
    - "time": 20:50:07.28
    - "short": 1022T205007
    """

    level: LogLevel = Field(default="INFO", description="Minimum console log level")
    format: Literal["console", "json"] = Field(default="console", description="Console output format")
    timestamp_format: Literal["iso", "compact", "time", "short"] = Field(
        default="compact",
        description="Timestamp layout used in console and file output",
    )
    enable_file: bool = Field(default=True, description="Also write JSON lines to a log file")
    file_path: Path | None = Field(default=None, description=f"Log file (defaults to {DEFAULT_LOG_FILE})")
    file_level: LogLevel = Field(default="WARNING", description="Minimum log level for the file")
    file_rotation: bool = Field(default=True, description="Rotate the file when it exceeds max_file_size_mb")
    max_file_size_mb: int = Field(default=10, description="Rotation threshold in MB")
    backup_count: int = Field(default=3, description="Rotated files to keep")


class _Ansi:
    """Terminal colors used by the console renderer."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    GRAY = "\033[90m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    LEVELS = {
        "DEBUG": CYAN,
        "INFO": GREEN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": MAGENTA,
    }


def _money(value: Any, places: int = 2) -> str:
    """Render a logged amount (logged as str) with separators; pass through anything unparseable."""
    try:
        return f"{Decimal(str(value)):,.{places}f}"
    except (InvalidOperation, ValueError):
        return str(value)


def _signed(value: Any) -> str:
    """Render a P&L amount with sign and color."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return str(value)
    color = _Ansi.GREEN if amount >= 0 else _Ansi.RED
    return f"{color}{amount:+,.2f}{_Ansi.RESET}"


class _LedgerFormatters:
    """Console layouts for the trading and wallet event families."""

    @staticmethod
    def stock_trade(event: str, fields: dict[str, Any]) -> str | None:
        if event not in ("portfolio.buy.executed", "portfolio.sell.executed"):
            return None
        side = "BUY" if event == "portfolio.buy.executed" else "SELL"
        color = _Ansi.GREEN if side == "BUY" else _Ansi.RED
        parts = [
            f"{color}{side:<4}{_Ansi.RESET} {_Ansi.MAGENTA}{fields.get('symbol', '?')}{_Ansi.RESET} "
            f"{fields.get('quantity', '?')} @ {_Ansi.CYAN}{_money(fields.get('price'))}{_Ansi.RESET}"
        ]
        if "average_buy_price" in fields:
            parts.append(f"avg {_money(fields['average_buy_price'])}")
        if "realized_pnl" in fields:
            parts.append(f"realized {_signed(fields['realized_pnl'])}")
        if fields.get("position_closed"):
            parts.append(f"{_Ansi.DIM}closed{_Ansi.RESET}")
        if "balance" in fields:
            parts.append(f"bal {_money(fields['balance'])}")
        return " | ".join(parts)

    @staticmethod
    def forex_trade(event: str, fields: dict[str, Any]) -> str | None:
        pair = f"{_Ansi.MAGENTA}{fields.get('pair', '?')}{_Ansi.RESET}"
        if event == "forex.trade.opened":
            side = fields.get("side", "?")
            color = _Ansi.GREEN if side == "BUY" else _Ansi.RED
            head = f"FX OPEN  {color}{side}{_Ansi.RESET} {pair} {_money(fields.get('amount'))} @ {fields.get('price')}"
            return f"{head} | bal {_money(fields.get('balance'))}"
        if event == "forex.trade.closed":
            head = f"FX CLOSE {pair} {fields.get('entry_price')} -> {fields.get('close_price')}"
            return f"{head} | P&L {_signed(fields.get('profit_loss'))} | bal {_money(fields.get('balance'))}"
        return None

    @staticmethod
    def wallet(event: str, fields: dict[str, Any]) -> str | None:
        if not event.startswith("wallet.") or "balance" not in fields:
            return None
        action = event.split(".", 1)[1].replace("_", " ").replace(".", " ")
        parts = [f"{_Ansi.YELLOW}WALLET{_Ansi.RESET} {action}"]
        if "amount" in fields:
            sign = "-" if event in ("wallet.withdrawal", "wallet.debit.rejected") else "+"
            parts[0] += f" {sign}{_money(fields['amount'])}"
        parts.append(f"bal {_money(fields['balance'])}")
        return " | ".join(parts)

    @classmethod
    def render(cls, event: str, fields: dict[str, Any]) -> str | None:
        for formatter in (cls.stock_trade, cls.forex_trade, cls.wallet):
            line = formatter(event, fields)
            if line is not None:
                return line
        return None


class LoggerFactory:
    """
    Factory for creating and configuring structured loggers.

    Call configure() once at startup (the CLI does this from the config
    file); modules call get_logger() at import time and auto-configure with
    defaults if nothing has been configured yet.

    Example:
        LoggerFactory.configure(LoggingConfig(level="DEBUG", enable_file=False))
        logger = LoggerFactory.get_logger()
        logger.info("portfolio.buy.executed", symbol="AAPL", quantity="10", price="150")
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Configure stdlib handlers and structlog.

        Args:
            config: LoggingConfig instance. If None, uses default configuration.
        """
        config = config or LoggingConfig()
        if config.enable_file and config.file_path is None:
            config.file_path = DEFAULT_LOG_FILE
        cls._config = config

        shared = cls._build_common_processors(config.timestamp_format)

        handlers: list[logging.Handler] = [cls._build_console_handler(config, shared)]
        root_level = getattr(logging, config.level)
        if config.enable_file:
            handlers.append(cls._configure_file_logging(config, shared))
            root_level = min(root_level, getattr(logging, config.file_level))
        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        if config.format == "console":
            exception_processors: list[Any] = [
                structlog.dev.set_exc_info,
                structlog.processors.ExceptionRenderer(structlog.dev.plain_traceback),  # type: ignore[arg-type]
            ]
        else:
            exception_processors = [structlog.processors.format_exc_info]

        structlog.configure(
            processors=[*shared, *exception_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        cls._configured = True

    @classmethod
    def _build_common_processors(cls, timestamp_format: str) -> list[Any]:
        """Processors run before rendering, for structlog and foreign stdlib records alike."""
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            cls._get_timestamper(timestamp_format),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.FILENAME, structlog.processors.CallsiteParameter.LINENO]
            ),
        ]

    @classmethod
    def _build_console_handler(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        renderer: Any = (
            cls._custom_console_renderer() if config.format == "console" else structlog.processors.JSONRenderer()
        )
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setLevel(getattr(logging, config.level))
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
        return handler

    @staticmethod
    def _get_timestamper(fmt: str) -> Any:
        """Timestamp processor writing 'log_timestamp' (domain events use 'timestamp')."""
        layouts: dict[str, Callable[[datetime], str]] = {
            "compact": lambda now: now.strftime("%y%m%d-%H%M%S.") + f"{now.microsecond // 10000:02d}",
            "time": lambda now: now.strftime("%H:%M:%S.") + f"{now.microsecond // 10000:02d}",
            "short": lambda now: now.strftime("%m%dT%H%M%S"),
        }
        layout = layouts.get(fmt, lambda now: now.isoformat())

        def add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
            event_dict["log_timestamp"] = layout(datetime.now(timezone.utc))
            return event_dict

        return add_timestamp

    @classmethod
    def _custom_console_renderer(cls) -> Callable[[Any, str, dict[str, Any]], str]:
        """Console renderer: ledger layouts for known events, key=value fallback otherwise."""

        def renderer(logger: Any, name: str, event_dict: dict[str, Any]) -> str:
            timestamp = event_dict.pop("log_timestamp", "")
            level = event_dict.pop("level", "info").upper()
            event = str(event_dict.pop("event", ""))
            filename = event_dict.pop("filename", "")
            lineno = event_dict.pop("lineno", "")
            logger_name = event_dict.pop("logger", "")
            exception = event_dict.pop("exception", None)
            request_id = event_dict.pop("request_id", None)

            level_str = f"[{_Ansi.LEVELS.get(level, '')}{level.lower()}{_Ansi.RESET}]"
            body = _LedgerFormatters.render(event, event_dict)
            if body is None:
                context = " ".join(
                    f"{key}={_Ansi.CYAN}{value}{_Ansi.RESET}"
                    for key, value in sorted(event_dict.items())
                    if not key.startswith("_")
                )
                body = f"{event} {_Ansi.GRAY}|{_Ansi.RESET} {context}" if context else event

            parts = [f"{_Ansi.DIM}{timestamp}{_Ansi.RESET}" if timestamp else "", level_str, body]
            if request_id:
                parts.append(f"{_Ansi.GRAY}[{request_id}]{_Ansi.RESET}")
            if filename and lineno:
                module_file = Path(filename).stem
                where = f"{logger_name}.{module_file}" if logger_name and logger_name != "tradeledger" else module_file
                parts.append(f"{_Ansi.GRAY}({where}:{lineno}){_Ansi.RESET}")

            line = " ".join(part for part in parts if part)
            return f"{line}\n{exception}" if exception else line

        return renderer

    @classmethod
    def _configure_file_logging(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """JSON-lines file handler, rotating unless disabled."""
        file_path = config.file_path or DEFAULT_LOG_FILE
        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler
        if config.file_rotation:
            handler = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(filename=str(file_path), encoding="utf-8")

        handler.setLevel(getattr(logging, config.file_level))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer(), foreign_pre_chain=pre_chain)
        )
        return handler

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Get a logger, configuring defaults on first use.

        Args:
            name: Logger name. If None, uses the calling module's __name__.
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            import inspect

            frame = inspect.currentframe()
            caller = frame.f_back if frame else None
            name = caller.f_globals.get("__name__", "tradeledger") if caller else "tradeledger"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Current logging configuration (defaults if not configured)."""
        return cls._config or LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop handlers and structlog configuration (used by tests)."""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)
        structlog.contextvars.clear_contextvars()
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()


def bind_request_context(**fields: Any) -> None:
    """Attach fields (request_id, user_id, path) to every event logged in this context."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
