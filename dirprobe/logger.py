"""简单日志封装"""
import logging
from typing import Optional

FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def get_logger(name='dirprobe', level=logging.INFO, log_file: Optional[str] = None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(h)
        if log_file:
            fh = logging.FileHandler(log_file, encoding='utf-8')
            fh.setFormatter(logging.Formatter(FORMAT))
            logger.addHandler(fh)
    logger.setLevel(level)
    return logger
