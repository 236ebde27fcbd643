import logging
from pathlib import Path
from dynamic_config.config.settings import settings

LOGGER_NAME = 'dynamic-config'


def setup_logger():
    """Set up logging configuration"""
    log = logging.getLogger(LOGGER_NAME)
    if log.handlers:
        return log

    log.setLevel(getattr(logging, str(settings.get('logging.level', 'INFO')).upper(), logging.INFO))
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = [logging.StreamHandler()]
    log_file = settings.get('logging.file')
    if log_file:
        # Create logs directory if it doesn't exist
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        log.addHandler(handler)

    return log

# Global logger instance
logger = setup_logger()
