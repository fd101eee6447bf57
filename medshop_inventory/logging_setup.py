import logging
import logging.handlers
from pathlib import Path

from medshop_inventory.config import config

# Library modules log through logging.getLogger(__name__) below this name
PACKAGE_LOGGER = 'medshop_inventory'
PACKAGE_LOG_FILE = 'medshop'


class Logger:
    """Logging manager for the Medical Shop Inventory.

    Two kinds of loggers are set up from the LOGGING section of the config:

    - the package logger, which collects everything the core, store and
      service modules log and writes it to ``medshop.log``;
    - named loggers for entry points (``app``, ``db_setup``), each with
      its own ``<name>.log``.

    Every file rotates at ``max_size_mb``. The console handler is added
    only when ``console_output`` is on.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger if not already initialized."""
        if self._initialized:
            return

        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])
        self._formatter = logging.Formatter(self._log_config['format'])
        self._loggers = {}

        if self._log_config['file_output']:
            self._log_dir.mkdir(parents=True, exist_ok=True)

        logging.getLogger().setLevel(self._level())
        self._package_logger = self._configure(logging.getLogger(PACKAGE_LOGGER), PACKAGE_LOG_FILE)
        self._app_logger = self.get_logger('app')

        self._initialized = True

    def _level(self):
        level_name = self._log_config['level'].upper()
        return getattr(logging, level_name, logging.INFO)

    def _handlers(self, file_name):
        handlers = []

        if self._log_config['file_output']:
            handlers.append(logging.handlers.RotatingFileHandler(
                self._log_dir / f"{file_name}.log",
                maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
                backupCount=self._log_config['backup_count']
            ))

        if self._log_config['console_output']:
            handlers.append(logging.StreamHandler())

        if not handlers:
            handlers.append(logging.NullHandler())

        for handler in handlers:
            handler.setFormatter(self._formatter)
        return handlers

    def _configure(self, target, file_name):
        target.setLevel(self._level())

        # Replace handlers so re-configuration never duplicates output
        for handler in target.handlers[:]:
            target.removeHandler(handler)
        for handler in self._handlers(file_name):
            target.addHandler(handler)

        target.propagate = False
        return target

    def get_logger(self, name):
        """Get an entry-point logger with its own log file.

        Args:
            name: Name of the logger, also used for the file name

        Returns:
            Configured logger instance
        """
        if name not in self._loggers:
            self._loggers[name] = self._configure(logging.getLogger(name), name)
        return self._loggers[name]

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with its stack trace.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(text, exc_info=exception)

    @property
    def package_logger(self):
        """Logger that receives the library modules' records."""
        return self._package_logger

    @property
    def app_logger(self):
        """Get the application logger."""
        return self._app_logger


# Global logger instance
logger = Logger()


def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)


def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
