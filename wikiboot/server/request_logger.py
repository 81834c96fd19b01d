# wikiboot/server/request_logger.py
import datetime
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class RequestLogger:
    """
    Writes one line per served request to a rotating file in the log directory.

    Lines use the common log format:
        host - user [time] "request line" status size
    """

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

        timestamp = datetime.datetime.now().strftime("%Y%m%d%H%M%S")
        self.log_file = os.path.join(directory, f"wikiboot{timestamp}.log")

        self._logger = logging.getLogger(f"wikiboot.requests.{id(self)}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._handler = RotatingFileHandler(self.log_file, maxBytes=MAX_LOG_BYTES,
                                            backupCount=LOG_BACKUP_COUNT, encoding='utf-8')
        self._handler.setFormatter(logging.Formatter('%(message)s'))
        self._logger.addHandler(self._handler)

    def log(self, host: str, request_line: str, status: int, size: int,
            user: Optional[str] = None) -> None:
        now = datetime.datetime.now().astimezone().strftime("%d/%b/%Y:%H:%M:%S %z")
        self._logger.info(f'{host} - {user or "-"} [{now}] "{request_line}" {status} {size}')

    def close(self) -> None:
        self._logger.removeHandler(self._handler)
        self._handler.close()

    def __str__(self):
        return f"RequestLogger({self.directory})"
