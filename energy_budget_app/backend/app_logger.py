# backend/app_logger.py
"""
Application logging setup: console plus an append-only log file under data/logs.
Modules log through logging.getLogger(__name__); this only wires the handlers.
"""
import os
import logging
from datetime import datetime
from typing import Optional

DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')
LOG_DIR = os.path.join(DATA_DIR, 'logs')
LOG_FILE = os.path.join(LOG_DIR, 'app.log')

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'


class MillisecondFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created)
        return dt.strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]


_configured = False


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger once. Safe to call again; later calls only adjust the level.

    Args:
        level: level name, defaults to LOG_LEVEL env var or INFO
        log_file: file path, defaults to data/logs/app.log
    """
    global _configured
    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if _configured:
        return root

    formatter = MillisecondFormatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    log_file = log_file or LOG_FILE
    try:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning("File logging disabled, could not open %s: %s", log_file, e)

    _configured = True
    return root
