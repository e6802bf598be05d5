"""
Unified logging for the BullBear strategy bots

Every component (platform client, strategies, runner) logs through loguru with
the same layout:
- Colored console output with source location (module:function:line)
- A shared history file and a per-session file under ``logs/``
- Component context (``STRATEGY:FRA``, ``EXCHANGE:BULLBEAR``) on every record
"""

import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger as _logger


LOGS_DIR = Path(__file__).parent.parent / "logs"
SOURCE_WIDTH = 55

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | "
    "{level:<8} | "
    "{extra[component_id]:<30} | "
    "{message}"
)


def _truncate_module_path(module: str, max_width: int) -> str:
    if len(module) <= max_width:
        return module

    parts = module.split(".")
    idx = len(parts) - 2
    while idx >= 0:
        candidate = ".".join(parts[idx:])
        if len(candidate) + 3 <= max_width:
            return f"...{candidate}"
        idx -= 1

    last = parts[-1]
    return f"...{last[-(max_width - 3):]}" if len(last) + 3 > max_width else f"...{last}"


def _with_source_location(record) -> bool:
    """Attach a right-aligned ``module:function:line`` column to the record."""
    if not record["extra"].get("component_id"):
        return False

    module_name = record.get("module") or record.get("name", "")
    function_name = record.get("function", "")
    suffix = f":{function_name}:{record.get('line', 0)}" if function_name else f":{record.get('line', 0)}"

    available = SOURCE_WIDTH - len(suffix)
    module_display = "..." if available <= 3 else _truncate_module_path(module_name, available)
    record["extra"]["short_name"] = f"{module_display}{suffix}".rjust(SOURCE_WIDTH)
    return True


def _ensure_component(record) -> bool:
    record["extra"].setdefault("component_id", "UNKNOWN")
    return True


class UnifiedLogger:
    """
    Component-scoped wrapper around the shared loguru logger.

    Sinks are installed once per process; every instance only binds its own
    component identifier.
    """

    def __init__(
        self,
        component_type: str,
        component_name: str,
        context: Optional[Dict[str, Any]] = None,
        log_to_console: bool = True,
        log_level: str = "INFO",
    ):
        self.component_type = component_type.upper()
        self.component_name = component_name.upper()
        self.context = context or {}
        self.log_level = log_level.upper()

        self.component_id = f"{self.component_type}:{self.component_name}"
        if self.context:
            context_str = ":".join(f"{k}={v}" for k, v in self.context.items())
            self.component_id = f"{self.component_id}:{context_str}"

        self._setup_sinks(log_to_console)
        self._logger = _logger.bind(component_id=self.component_id)

    def _setup_sinks(self, log_to_console: bool) -> None:
        if not hasattr(_logger, "_bullbear_console_setup"):
            _logger.remove()
            if log_to_console:
                console_format = (
                    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                    "<level>{level: <8}</level> | "
                    "<cyan>{extra[short_name]}</cyan> | "
                    "<level>{message}</level>"
                )
                _logger.add(
                    sys.stdout,
                    format=console_format,
                    level=self.log_level,
                    colorize=True,
                    filter=_with_source_location,
                    backtrace=True,
                    diagnose=False,
                )
            _logger._bullbear_console_setup = True

        LOGS_DIR.mkdir(exist_ok=True)

        if not hasattr(_logger, "_bullbear_history_setup"):
            _logger.add(
                str(LOGS_DIR / "unified_history.log"),
                format=FILE_FORMAT,
                level="DEBUG",
                filter=_ensure_component,
                rotation="20 MB",
                retention=5,
                enqueue=True,
                catch=True,
            )
            _logger._bullbear_history_setup = True

        if not hasattr(_logger, "_bullbear_session_setup"):
            session_ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            _logger.add(
                str(LOGS_DIR / f"session_{session_ts}.log"),
                format=FILE_FORMAT,
                level="DEBUG",
                filter=_ensure_component,
                enqueue=True,
                catch=True,
            )
            _logger._bullbear_session_setup = True

    def debug(self, message: str, **kwargs):
        self._logger.opt(depth=1).debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self._logger.opt(depth=1).info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.opt(depth=1).warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self._logger.opt(depth=1).error(message, **kwargs)

    def critical(self, message: str, **kwargs):
        self._logger.opt(depth=1).critical(message, **kwargs)

    def exception(self, message: str, **kwargs):
        self._logger.opt(depth=1, exception=True).error(message, **kwargs)

    def log(self, message: str, level: str = "INFO", **kwargs):
        """Log at a level given by name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level = level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            level = "INFO"
        self._logger.opt(depth=1).log(level, message, **kwargs)

    def log_trade(self, position_id: str, action: str, assets: Any, status: str):
        """Log an open/close with structured fields for the history files."""
        legs = ", ".join(
            f"{'LONG' if leg.get('long') else 'SHORT'} {leg.get('denom')} x{leg.get('percent')}"
            for leg in assets or []
        )
        self._logger.bind(
            position_id=position_id, action=action, status=status, trade=True
        ).opt(depth=1).info(
            f"TRADE: {action.upper()} [{legs}] | Position: {position_id} | Status: {status}"
        )

    def with_context(self, **context) -> "UnifiedLogger":
        """Return a logger carrying extra context (for example a position id)."""
        return UnifiedLogger(
            component_type=self.component_type.lower(),
            component_name=self.component_name.lower(),
            context={**self.context, **context},
            log_level=self.log_level,
        )

    def flush(self):
        """Give enqueued file writes a moment to drain before the process exits."""
        _logger.complete()
        time.sleep(0.05)
        sys.stdout.flush()
        sys.stderr.flush()


def get_logger(
    component_type: str,
    component_name: str,
    context: Optional[Dict[str, Any]] = None,
    log_to_console: bool = True,
    log_level: Optional[str] = None,
) -> UnifiedLogger:
    """
    Create a component logger.

    ``log_level`` defaults to the LOG_LEVEL environment variable, then INFO.

    Examples:
        logger = get_logger("exchange", "bullbear")
        logger = get_logger("strategy", "fra", {"dry_run": True})
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    return UnifiedLogger(
        component_type=component_type,
        component_name=component_name,
        context=context,
        log_to_console=log_to_console,
        log_level=log_level,
    )


def get_exchange_logger(exchange_name: str, **context) -> UnifiedLogger:
    """Logger for platform clients."""
    return get_logger("exchange", exchange_name, context)


def get_strategy_logger(strategy_name: str, **context) -> UnifiedLogger:
    """Logger for trading strategies."""
    return get_logger("strategy", strategy_name, context)


def get_core_logger(module_name: str, **context) -> UnifiedLogger:
    """Logger for shared utilities (cache, state files, runner)."""
    return get_logger("core", module_name, context)


def log_stage(
    logger_obj: Any,
    title: str,
    *,
    icon: Optional[str] = None,
    stage_id: Optional[str] = None,
    border: str = "=",
    width: int = 55,
    level: str = "INFO",
) -> None:
    """
    Emit a framed stage banner, e.g. the start of a strategy cycle.

    Works with UnifiedLogger instances and anything exposing ``info``/``debug``.
    """
    label_parts = []
    if stage_id:
        label_parts.append(f"{stage_id}.")
    if icon:
        label_parts.append(icon)
    label_parts.append(title)

    emit = getattr(logger_obj, level.lower(), None) or logger_obj.info
    border_line = border * width
    emit(border_line)
    emit(" ".join(label_parts))
    emit(border_line)
