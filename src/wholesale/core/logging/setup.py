from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pythonjsonlogger import jsonlogger

LOG_PREFIX = "wholesale"
ALERTS_FILENAME = f"{LOG_PREFIX}-alerts.jsonl"
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(correlation_id)s %(message)s"


class CorrelationIdFilter(logging.Filter):
    def __init__(self, correlation_id: str):
        super().__init__()
        self._correlation_id = correlation_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = self._correlation_id
        return True


def _handler(
    handler: logging.Handler,
    formatter: logging.Formatter,
    correlation_filter: logging.Filter,
    level: int = logging.NOTSET,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(correlation_filter)
    return handler


def configure_logging(
    log_dir: Path,
    correlation_id: str,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> Path:
    """
    Настраивает корневой логгер: консоль, дневной текстовый лог, дневной JSONL
    и общий файл алертов (ERROR и выше) для заказов, требующих ручной сверки.
    Возвращает путь к файлу алертов.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    utc_day = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    alerts_path = log_dir / ALERTS_FILENAME

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.setLevel(level)

    correlation_filter = CorrelationIdFilter(correlation_id)
    text_formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    json_formatter = jsonlogger.JsonFormatter(fmt=JSON_FORMAT)

    # Консоль только для предупреждений: основной вывод CLI идет через rich
    root.addHandler(_handler(logging.StreamHandler(), text_formatter, correlation_filter, console_level))
    root.addHandler(
        _handler(
            logging.FileHandler(log_dir / f"{LOG_PREFIX}-{utc_day}.log", encoding="utf-8"),
            text_formatter,
            correlation_filter,
        )
    )
    root.addHandler(
        _handler(
            logging.FileHandler(log_dir / f"{LOG_PREFIX}-{utc_day}.jsonl", encoding="utf-8"),
            json_formatter,
            correlation_filter,
        )
    )
    root.addHandler(
        _handler(
            logging.FileHandler(alerts_path, encoding="utf-8"),
            json_formatter,
            correlation_filter,
            logging.ERROR,
        )
    )
    return alerts_path


def get_logger(name: str, correlation_id: str, **context: str) -> logging.LoggerAdapter:
    """Адаптер с correlation_id и дополнительным контекстом (например user_id) в каждой записи."""
    base_logger = logging.getLogger(name)
    return logging.LoggerAdapter(base_logger, extra={"correlation_id": correlation_id, **context})
