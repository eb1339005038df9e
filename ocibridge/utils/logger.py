#!/usr/bin/env python3

import logging
import os
import sys


# Disabling redefined-builtin because the native logging also violates this
# pylint: disable=redefined-builtin
def setup(name="ocibridge", level=None, format=None, debug_file=None):
    """Setup a logger for an ocibridge module. Parameters that are not
    provided fall back to environment variables or defaults.

    Args:
        name (str, optional): The name of the logger. Defaults to "ocibridge".
        level (str, optional): The level of logging. Defaults to environment variable "LOGLEVEL"
            if set, otherwise to "INFO".
        format (str, optional): The format of the logging messages. If not provided,
            a default format will be used based on the level.
        debug_file (str, optional): A file to which debug level logs should be written,
            e.g. to keep a full record of transfer commands and container ids.

    Returns:
        Logger: A configured logger.
    """
    level = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
    default_format = (
        "| %(levelname)s | [%(filename)s: %(lineno)d]: | %(message)s"
        if level == "DEBUG"
        else "| %(name)-20s | %(levelname)-8s | %(message)s"
    )
    format = format or default_format
    logging.basicConfig(level=level, stream=sys.stdout, format=format)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if debug_file and not any(
        isinstance(handler, logging.FileHandler) for handler in logger.handlers
    ):
        file_handler = logging.FileHandler(debug_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(format))
        logger.addHandler(file_handler)
    return logger
