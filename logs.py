import logging
import sys

LOG_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level=logging.WARNING):
    """Sends log records from every module of the app to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # matplotlib is chatty at debug level (font cache, backend selection).
    logging.getLogger('matplotlib').setLevel(max(level, logging.WARNING))
    return root
