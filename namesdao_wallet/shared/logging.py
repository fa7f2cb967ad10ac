"""Logging setup for the Namesdao wallet engine.

Records go to ``namesdao.log`` in the wallet directory (and optionally to
stdout), either human readable or as one JSON object per line. Key material,
mnemonics, cloaked registration memos and armored PGP blocks are redacted
before a record reaches any handler output.

Services log through :func:`get_logger`, which attaches context such as the
``.xch`` name being worked on.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from namesdao_wallet.shared.config import resolve_storage_dir
from namesdao_wallet.shared.errors import NamesdaoError
from namesdao_wallet.shared.network import NetworkError

PACKAGE_LOGGER = "namesdao_wallet"
LOG_FORMATS = ("human", "json")


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "human"
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "namesdao.log"
    redact: bool = True
    preserve_addresses: bool = True

    @classmethod
    def from_environment(cls, storage_dir: Path | None = None) -> "LoggingConfig":
        """Read ``NAMESDAO_WALLET_LOG_*`` overrides.

        Unknown levels fall back to INFO and unknown formats to ``human``.
        The log directory is the wallet storage directory.
        """
        try:
            log_level = LogLevel(os.getenv("NAMESDAO_WALLET_LOG_LEVEL", "INFO").strip().upper())
        except ValueError:
            log_level = LogLevel.INFO

        log_format = os.getenv("NAMESDAO_WALLET_LOG_FORMAT", "human").strip().lower()
        if log_format not in LOG_FORMATS:
            log_format = "human"

        return cls(
            log_level=log_level,
            log_format=log_format,
            log_to_stdout=_env_flag("NAMESDAO_WALLET_LOG_STDOUT"),
            log_dir=resolve_storage_dir(storage_dir),
        )


# Ordered: whole PGP blocks first so the memo rule never sees their bodies.
REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"-----BEGIN PGP (MESSAGE|PRIVATE KEY BLOCK)-----.*?-----END PGP \1-----",
            re.DOTALL,
        ),
        "[PGP_REDACTED]",
    ),
    (
        re.compile(r"(:(?:register|renew):)([A-Za-z0-9%._~*'()!-]{16,})"),
        r"\1[MEMO_REDACTED]",
    ),
    (
        re.compile(
            r"((?:private|secret|master)[ _-]?key['\"]?\s*[:=]\s*['\"]?)(?:0x)?[0-9a-f]{64}",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(r"((?:mnemonic|seed phrase)['\"]?\s*[:=]\s*['\"]?)[^'\"\n]+", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
]

ADDRESS_PATTERN = re.compile(r"\bt?xch1[02-9ac-hj-np-z]{58}\b", re.IGNORECASE)

SENSITIVE_KEYS = ("private_key", "privatekey", "secret", "mnemonic", "memo", "passphrase")


def sanitize_message(message: str, preserve_addresses: bool = True) -> str:
    if not message:
        return message

    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)
    if not preserve_addresses:
        message = ADDRESS_PATTERN.sub("[ADDRESS_REDACTED]", message)
    return message


def _sanitize_value(value: Any, preserve_addresses: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_addresses)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_addresses)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item, preserve_addresses) for item in value]
    return value


def sanitize_dict(data: dict[str, Any], preserve_addresses: bool = True) -> dict[str, Any]:
    return {
        key: "[REDACTED]"
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS)
        else _sanitize_value(value, preserve_addresses)
        for key, value in data.items()
    }


class ErrorHint(NamedTuple):
    pattern: str
    message: str
    suggestion: str | None = None


ERROR_HINTS: list[ErrorHint] = [
    ErrorHint(
        r"timeout|timed out",
        "The Namesdao service timed out.",
        "Try again in a moment.",
    ),
    ErrorHint(
        r"connection refused|cannot connect|connection error|failed to establish",
        "Unable to reach the Namesdao service.",
        "Check your internet connection and try again.",
    ),
    ErrorHint(
        r"can't send more than|insufficient|not enough",
        "Insufficient balance for this payment.",
        "Make sure the funding wallet covers the price and the fee.",
    ),
    ErrorHint(
        r"not synced|syncing",
        "The wallet is still syncing.",
        "Wait for the wallet to finish syncing and try again.",
    ),
    ErrorHint(
        r"invalid.*address|address.*invalid",
        "The address provided is not valid.",
        "Check that it is an xch1 or txch1 address.",
    ),
    ErrorHint(
        r"rate limit|too many requests|\b429\b",
        "Too many requests to the Namesdao service.",
        "Wait a moment and try again.",
    ),
    ErrorHint(
        r"\b404\b|not found",
        "The Namesdao service could not find that record.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    """Map an error to ``(message, suggestion)`` for display.

    Domain errors already carry display text; transport errors and anything
    else are matched against :data:`ERROR_HINTS`.
    """
    if isinstance(error, NamesdaoError) and not isinstance(error, NetworkError):
        return error.message, None

    text = str(error).lower()
    for hint in ERROR_HINTS:
        if re.search(hint.pattern, text):
            return hint.message, hint.suggestion
    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    message, suggestion = get_user_friendly_error(error)
    return f"{message} {suggestion}" if suggestion else message


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, redact: bool = True, preserve_addresses: bool = True):
        super().__init__()
        self.redact = redact
        self.preserve_addresses = preserve_addresses

    def _clean(self, text: str) -> str:
        return sanitize_message(text, self.preserve_addresses) if self.redact else text

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            payload["context"] = (
                sanitize_dict(context, self.preserve_addresses) if self.redact else context
            )

        if record.exc_info:
            payload["exception"] = self._clean(self.formatException(record.exc_info))

        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, redact: bool = True, preserve_addresses: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.redact = redact
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            fields = " ".join(f"{key}={value}" for key, value in context.items())
            text = f"{text} [{fields}]"
        return sanitize_message(text, self.preserve_addresses) if self.redact else text


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches a ``context`` dict to every record."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **(extra.get("context") or {})}
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


_logging_initialized = False


def _formatter_for(config: LoggingConfig) -> logging.Formatter:
    if config.log_format == "json":
        return StructuredFormatter(config.redact, config.preserve_addresses)
    return HumanReadableFormatter(config.redact, config.preserve_addresses)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Attach handlers to the package logger. Later calls are ignored."""
    global _logging_initialized

    if _logging_initialized:
        return

    config = config or LoggingConfig.from_environment()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.log_level.value))
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        log_dir = config.log_dir or resolve_storage_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / config.log_filename, mode="a", encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(_formatter_for(config))
        package_logger.addHandler(handler)

    _logging_initialized = True


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "format_error_for_user",
    "setup_logging",
    "get_logger",
]
