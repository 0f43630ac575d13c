"""
Loguru sinks for the reservation service

Everything is written through one bound logger carrying the service context.
Stdlib loggers (granian access log, SQLAlchemy, httpx) are routed into it.
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import re
import sys
from typing import TYPE_CHECKING

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Payment proofs are bearer-like values; never print them in full
SENSITIVE_KEYWORDS = frozenset(
    {
        'payment_signature',
        'transaction_hash',
        'sale_transaction_hash',
        'proof',
    }
)

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# '127.0.0.1 - "POST /api/booking/reserve HTTP/1.1" - 201 - 8ms'
_ACCESS_LINE = re.compile(r'"[A-Z]+ \S+ HTTP/[\d.]+" - (\d{3})\b')
_ACCESS_LEVELS = ((500, 'CRITICAL'), (400, 'ERROR'), (300, 'WARNING'), (200, 'SUCCESS'))

# Loggers that are pure noise at DEBUG (aiosqlite logs every cursor operation)
_QUIET_DEBUG_LOGGERS = ('aiosqlite', 'asyncio')


def _access_log_level(message: str) -> str | None:
    match = _ACCESS_LINE.search(message)
    if match is None:
        return None
    status_code = int(match.group(1))
    for floor, level in _ACCESS_LEVELS:
        if status_code >= floor:
            return level
    return 'INFO'


def _with_default_extra(logger: 'LoguruLogger') -> 'LoguruLogger':
    return logger.bind(
        **{
            ExtraField.SERVICE_CONTEXT: get_service_context(),
            ExtraField.CHAIN_START_TIME: '',
            ExtraField.CALL_TARGET: '',
        }
    )


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru, keeping the caller's frame."""

    def __init__(self, target: 'LoguruLogger') -> None:
        super().__init__()
        self._target = target

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno <= logging.DEBUG and record.name.startswith(_QUIET_DEBUG_LOGGERS):
            return

        message = record.getMessage()
        level: str | int | None = _access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        self._target.opt(depth=depth, exception=record.exc_info).log(level, message)


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)


def _log_file_path() -> str:
    hour = datetime.now(timezone.utc).strftime('%Y-%m-%d_%H')
    test_log_dir = os.environ.get('TEST_LOG_DIR')
    if test_log_dir:
        return f'{test_log_dir}/test_{hour}.log'
    return f'{LOG_DIR}/{hour}.log'


def _configure() -> 'LoguruLogger':
    loguru_logger.remove()
    bound = _with_default_extra(loguru_logger)
    level = 'DEBUG' if settings.DEBUG else 'INFO'

    bound.add(sys.stdout, format=io_log_format, level=level, enqueue=True)
    # Production ships stdout to the collector; files are for local runs and tests
    if settings.DEBUG:
        bound.add(
            _log_file_path(),
            format=io_log_format,
            level=level,
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler(bound)], level=0, force=True)
    return bound


custom_logger = _configure()
