"""
Run-level helpers for the superbank command: logging and output layout.
"""

import os
import pathlib
import logging

from superbank.config import OUTPUT_SUBDIRS

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(debug=False, log_level='info', log_file=None):
    """Configure logging for a superbank run.

    Logs go to the console and to ``log_file``, which defaults to the
    ``LOG_FILE`` environment variable and then ``debug.log``.

    Returns:
        str: The log file in use
    """
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    log_file = str(log_file or os.getenv('LOG_FILE', 'debug.log'))
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
    logging.getLogger('superbank').setLevel(level)
    return log_file


def create_output_directories(output_dir):
    """Create the run's output tree.

    Args:
        output_dir (str or pathlib.Path): Base directory for output files

    Returns:
        dict: ``{name: pathlib.Path}`` for the base (``'base'``) and each
        subdirectory in ``OUTPUT_SUBDIRS``
    """
    base = pathlib.Path(output_dir)
    logger.info(f"Creating output directories in {base}")

    paths = {'base': base}
    for name in OUTPUT_SUBDIRS:
        paths[name] = base / name
        paths[name].mkdir(parents=True, exist_ok=True)
    return paths
