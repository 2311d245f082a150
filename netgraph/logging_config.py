"""
Logging configuration for netgraph.

stdout carries only the JSON document (or the CGI response), so all log
output goes to stderr, which web servers send to their error log.
"""

import logging
import os
import sys

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """
    Set up the ``netgraph`` logger.

    Args:
        verbose: log at DEBUG instead of WARNING (also enabled by NETGRAPH_DEBUG=1)
        stream: destination, defaults to sys.stderr

    Returns:
        Configured package logger
    """
    if os.environ.get('NETGRAPH_DEBUG', '') not in ('', '0'):
        verbose = True

    logger = logging.getLogger("netgraph")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Clear existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger
