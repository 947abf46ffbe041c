import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class GenerationLogger:
    """
    Logging for the image generation job.

    Scheduled runs are started by cron with no terminal attached, so besides
    stdout the log can also be appended to `log_file`. One logger is shared
    by all components; constructing it again (the CLI does so per run)
    reapplies the level and adds the file handler at most once per path.
    """

    def __init__(self, log_level=logging.INFO, log_file: str = None):
        self.logger = logging.getLogger("creativegen")
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(LOG_FORMAT)

        if not self._has_handler(logging.StreamHandler):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file).resolve()
            if not self._has_handler(logging.FileHandler, baseFilename=str(log_path)):
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_path, encoding="utf-8")
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def _has_handler(self, handler_type, **attrs) -> bool:
        for handler in self.logger.handlers:
            # FileHandler is a StreamHandler too, only match the exact type
            if type(handler) is handler_type and all(getattr(handler, k, None) == v for k, v in attrs.items()):
                return True
        return False

    def close(self):
        """Detach and close file handlers, used when a run ends."""
        for handler in list(self.logger.handlers):
            if isinstance(handler, logging.FileHandler):
                self.logger.removeHandler(handler)
                handler.close()

    def info(self, message):
        self.logger.info(message)

    def debug(self, message):
        self.logger.debug(message)

    def warning(self, message):
        self.logger.warning(message)

    def error(self, message):
        self.logger.error(message)

    def exception(self, message):
        self.logger.exception(message)
