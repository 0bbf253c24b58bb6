import logging
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_logging(service_name: str, level: str = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """Standardized logging setup for all services"""

    # Create formatter
    formatter = logging.Formatter(
        fmt=fmt or DEFAULT_LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)

    # Console handler, added once even if the service module is re-imported
    if not any(getattr(h, "_greenstar_console", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._greenstar_console = True
        root_logger.addHandler(console_handler)

    # Service-specific logger
    service_logger = logging.getLogger(service_name)
    return service_logger
