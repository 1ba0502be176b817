import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level_name: str = "INFO") -> logging.Logger:
    """
    Configures the 'partnerhub' logger hierarchy.
    
    Args:
        level_name: The logging level (e.g., "DEBUG", "INFO").
        
    Returns:
        The package logger. Service modules log through children of it
        (logging.getLogger(__name__)), so one handler covers all of them.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    logger = logging.getLogger("partnerhub")
    logger.setLevel(level)
    
    # Calling twice (app factory + CLI) must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    
    return logger
