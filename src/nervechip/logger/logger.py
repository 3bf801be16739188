import os
import threading
from datetime import datetime
from enum import Enum

from .local_file_strategy import LocalFileStrategy


class Logger:
    """
    Static logger shared by the simulation core, the controllers and the GUI.

    Messages are handed to a LogStorageStrategy; nothing is recorded until a
    strategy is installed (via initialize() or set_log_storage_strategy()).
    """

    class LogPriority(Enum):
        DEBUG = 1
        INFO = 2
        WARNING = 3
        ERROR = 4
        CRITICAL = 5

    DEFAULT_LOG_PATH = "/tmp/nervechip_logs.txt"
    LOG_PATH_ENV_VAR = "NERVECHIP_LOG_PATH"

    is_logging_enabled = True
    log_storage_strategy = None
    _log_lock = threading.RLock()
    _strategy_lock = threading.Lock()
    _initialize_lock = threading.Lock()

    # INITIALIZE LOGGER WITH FILE STORAGE
    @classmethod
    def initialize(cls):
        """
        Installs a LocalFileStrategy unless a strategy is already set.

        The file location is read from $NERVECHIP_LOG_PATH, falling back to
        DEFAULT_LOG_PATH.
        """
        with cls._initialize_lock:
            if cls.log_storage_strategy is None:
                file_location = os.getenv(cls.LOG_PATH_ENV_VAR, cls.DEFAULT_LOG_PATH)
                cls.set_log_storage_strategy(LocalFileStrategy(file_location))
                cls.log(f"Logger initialized with file storage at {file_location}.",
                        cls.LogPriority.INFO)

    @classmethod
    def log(cls, message, priority=LogPriority.DEBUG):
        """
        Stores a message with the given priority.

        Parameters:
        message (str): The log message.
        priority (LogPriority): Priority level (default DEBUG).
        """
        with cls._log_lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.store_log(
                    message, priority.name, datetime.now().strftime("%Y-%m-%d %H:%M:%S")
                )

    @classmethod
    def set_log_storage_strategy(cls, log_storage_strategy):
        with cls._strategy_lock:
            cls.log_storage_strategy = log_storage_strategy

    @classmethod
    def reset(cls):
        """Detach the storage strategy and re-enable logging."""
        with cls._strategy_lock:
            cls.log_storage_strategy = None
        cls.is_logging_enabled = True

    @classmethod
    def flush_logs(cls):
        with cls._log_lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.flush_logs()

    @classmethod
    def disable_logging(cls):
        with cls._log_lock:
            cls.log("Logging disabled")
            cls.is_logging_enabled = False

    @classmethod
    def enable_logging(cls):
        with cls._log_lock:
            cls.is_logging_enabled = True
            cls.log("Logging enabled")
