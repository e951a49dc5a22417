#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Logging utilities for Subtitle Translator.
"""

import os
import logging
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "subtitle_translator"

FILE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_file: Optional[str] = None, verbose: bool = False,
                  log_dir: Optional[str] = None, console: Optional[Console] = None) -> logging.Logger:
    """
    Set up logging configuration.

    Console output goes through Rich on stderr so it does not mix with
    command output. A file log is written when log_file or log_dir is
    given; the file always receives DEBUG records.

    Args:
        log_file: Path to log file
        verbose: Whether to enable verbose logging
        log_dir: Directory for a timestamped log file (used when log_file is None)
        console: Rich console for log output (default: a stderr console)

    Returns:
        Configured logger
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Create logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        omit_repeated_times=False,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    if log_file is None and log_dir:
        # Generate timestamp for log file name
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"subtitle_translator_{timestamp}.log")

    if log_file:
        try:
            # Create directory for log file if it doesn't exist
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
            logger.addHandler(file_handler)
            logger.info(f"Log file: {log_file}")
        except OSError as e:
            logger.error(f"Failed to set up file logging: {e}")

    return logger
