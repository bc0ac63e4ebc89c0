"""Logging configuration for NetCheck."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


LOG_LEVEL_ENV = "NETCHECK_LOG_LEVEL"


def configure_logging(default: str = "WARNING") -> None:
    """Configure application-wide logging.
    
    Respects NETCHECK_LOG_LEVEL environment variable. Records go to stderr
    through rich so they do not interleave with the report on stdout.
    
    Environment Variables:
        NETCHECK_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    
    Examples:
        # Show probe timings and scheduler decisions
        $ NETCHECK_LOG_LEVEL=DEBUG netcheck example.com
    """
    log_level_str = os.environ.get(LOG_LEVEL_ENV, default).upper()
    
    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    
    log_level = log_level_map.get(log_level_str, log_level_map.get(default.upper(), logging.WARNING))
    
    logging.basicConfig(
        level=log_level,
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    
    logging.getLogger(__name__).debug("Logging configured: level=%s", logging.getLevelName(log_level))
