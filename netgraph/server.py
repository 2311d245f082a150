#!/usr/bin/env python3
"""
netgraph-server - iptables snapshot as JSON, from the command line or CGI

Dumps every chain of an iptables table with its type, policy, counters and
references:
- Builtin chains: policy, packet and byte counters
- User-defined chains: reference count
- Rules: enumerated per chain (contents are not decoded)

Run directly it behaves as a CLI diagnostic: failures print one line on
stderr and exit non-zero without any JSON. Run by a web server (CGI, detected
through GATEWAY_INTERFACE) it always answers with a well-formed JSON document,
carrying an "error" member and a 500 status when something failed.

Requirements:
    - Python 3.8+
    - cffi>=1.0.0
    - Root/sudo access (or CAP_NET_ADMIN) to read the tables

Usage:
    sudo netgraph-server                    # filter table as JSON
    sudo netgraph-server -t nat             # another table
    sudo netgraph-server -c INPUT           # a single chain
    netgraph-server --version               # Show version

Exit status:
    0 success, 1 failure, 4 table busy (retry later)
"""

import logging
import sys
from typing import Callable, Optional, TextIO

from netgraph import __version__
from netgraph.config import MODE_CLI, MODE_SERVICE, RunConfig
from netgraph.errors import OTHER_PROBLEM, NetgraphError
from netgraph.iptc_table import IptcTable
from netgraph.logging_config import setup_logging
from netgraph.result_tree import PROTOCOL, ResultTree
from netgraph.traversal import traverse

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_ERROR = 500
HTTP_REASONS = {HTTP_OK: 'OK', HTTP_ERROR: 'Application Error'}


def server_string() -> str:
    """Value of the Server response header"""
    python = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    return f"{PROTOCOL}/{__version__} (Python/{python})"


def write_cgi_headers(out: TextIO, http_status: int) -> None:
    """
    Non-parsed CGI response header block.

    The web server passes this through untouched, so it starts with a full
    HTTP status line.
    """
    out.write(f"HTTP/1.1 {http_status} {HTTP_REASONS[http_status]}\r\n")
    out.write(f"Server: {server_string()}\r\n")
    out.write("Content-Type: application/json\r\n")
    out.write("\r\n")


def handle_failure(mode: str, exc: BaseException, tree: ResultTree,
                   err: TextIO) -> int:
    """
    Surface a failure the way the current mode requires.

    CLI mode prints one diagnostic line; service mode records the message in
    the document so a valid response can still be sent.

    Returns:
        Process exit status for the failure
    """
    status = exc.exit_status if isinstance(exc, NetgraphError) else OTHER_PROBLEM

    if mode == MODE_CLI:
        err.write(f"{PROTOCOL}: {exc}\n")
        err.flush()
    elif mode == MODE_SERVICE:
        tree.set_error(str(exc))
    else:
        raise ValueError(f"Invalid mode: {mode}")
    return status


def run(config: RunConfig,
        table_factory: Optional[Callable] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None) -> int:
    """
    Inspect one table and write the result.

    Args:
        config: run parameters
        table_factory: callable returning a context manager for an open table
            (defaults to IptcTable)
        out: response stream, defaults to sys.stdout
        err: diagnostic stream, defaults to sys.stderr

    Returns:
        Process exit status
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    if table_factory is None:
        table_factory = IptcTable

    tree = ResultTree()
    failure = None

    try:
        with table_factory(config.table) as table:
            result = traverse(table, tree, chain=config.chain)
        logger.debug("table %s: %d chains", config.table, result.chain_count)
    except NetgraphError as e:
        logger.debug("run failed: %s", e)
        failure = e
    except Exception as e:
        logger.exception("Unexpected error reading table %s", config.table)
        failure = e

    if failure is not None:
        status = handle_failure(config.mode, failure, tree, err)
        if config.mode == MODE_CLI:
            return status
    else:
        status = 0

    if config.mode == MODE_SERVICE:
        write_cgi_headers(out, HTTP_OK if status == 0 else HTTP_ERROR)
    out.write(tree.serialize(compact=config.compact))
    out.write("\n")
    out.flush()
    return status


def main(argv=None) -> int:
    """Main entry point"""
    config = RunConfig.load(argv, version=__version__)
    setup_logging(verbose=config.verbose)

    try:
        return run(config)
    except KeyboardInterrupt:
        if config.mode == MODE_CLI:
            print("\nInterrupted by user", file=sys.stderr)
            return 130
        raise


if __name__ == '__main__':
    sys.exit(main())
