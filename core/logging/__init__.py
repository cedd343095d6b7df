"""
Модуль логирования StaffPay Weekly
"""

from .logger import logger, StructuredLogger, JSONFormatter, ContextTextFormatter, setup_logging

__all__ = ["logger", "StructuredLogger", "JSONFormatter", "ContextTextFormatter", "setup_logging"]
