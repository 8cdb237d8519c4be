import logging

from tqdm import tqdm

LOGGER_NAME = "crunchy_cli"
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(task_name)s] - %(message)s"
OFF = logging.CRITICAL + 1


class TqdmStreamHandler(logging.StreamHandler):
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


class TaskNameFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "task_name"):
            record.task_name = "SYSTEM"
        return True


class _TaskLogger(logging.LoggerAdapter):
    def __init__(self, task_name: str):
        super().__init__(logging.getLogger(LOGGER_NAME), {"task_name": task_name})


MAIN = _TaskLogger("MAIN")
HTTP = _TaskLogger("HTTP")
DOWNLOAD = _TaskLogger("DOWNLOAD")
ARCHIVE = _TaskLogger("ARCHIVE")
MERGE = _TaskLogger("MERGE")
LOGIN = _TaskLogger("LOGIN")
INFO = _TaskLogger("INFO")
UPDATE = _TaskLogger("UPDATE")


class Logger:
    """Output policy of one invocation.

    Only one instance is active at a time: ``apply`` swaps the handler of the
    ``crunchy_cli`` logger and sets its level, so the last applied policy wins.
    Developer mode (full tracebacks for unexpected errors) follows debug output.
    """

    def __init__(self, debug_enabled: bool, info_enabled: bool, error_enabled: bool):
        self.debug_enabled = debug_enabled
        self.info_enabled = info_enabled
        self.error_enabled = error_enabled

    def __repr__(self) -> str:
        return (
            f"Logger(debug={self.debug_enabled}, info={self.info_enabled}, error={self.error_enabled})"
        )

    @property
    def level(self) -> int:
        if self.debug_enabled:
            return logging.DEBUG
        if self.info_enabled:
            return logging.INFO
        if self.error_enabled:
            return logging.ERROR
        return OFF

    def is_dev(self) -> bool:
        return self.debug_enabled

    def apply(self) -> "Logger":
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if isinstance(handler, TqdmStreamHandler):
                logger.removeHandler(handler)

        handler = TqdmStreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(TaskNameFilter())
        logger.addHandler(handler)
        logger.setLevel(self.level)
        return self

    def debug(self, msg: str, *args):
        MAIN.debug(msg, *args)

    def info(self, msg: str, *args):
        MAIN.info(msg, *args)

    def warning(self, msg: str, *args):
        MAIN.warning(msg, *args)

    def err(self, msg: str, *args):
        MAIN.error(msg, *args)


def default_logger() -> Logger:
    return Logger(debug_enabled=False, info_enabled=True, error_enabled=True)
