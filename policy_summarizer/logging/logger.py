import logging
import sys


class Log:
    """Centralized logging with structured format."""

    _logger: logging.Logger = logging.getLogger("policy_summarizer")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **fields: object) -> None:
        """Log an info message."""
        cls._logger.info(cls._format(message, fields))

    @classmethod
    def error(cls, message: str, **fields: object) -> None:
        """Log an error message."""
        cls._logger.error(cls._format(message, fields))

    @classmethod
    def warning(cls, message: str, **fields: object) -> None:
        """Log a warning message."""
        cls._logger.warning(cls._format(message, fields))

    @classmethod
    def debug(cls, message: str, **fields: object) -> None:
        """Log a debug message."""
        cls._logger.debug(cls._format(message, fields))

    @staticmethod
    def _format(message: str, fields: dict[str, object]) -> str:
        if not fields:
            return message
        rendered = ", ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} [{rendered}]"
