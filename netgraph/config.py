"""
Run configuration.

A run is configured either from the command line (CLI mode) or from the CGI
request environment (service mode). The mode is decided once, by whether the
web server set GATEWAY_INTERFACE.
"""

import argparse
from dataclasses import dataclass
import os
from typing import List, Mapping, Optional
from urllib.parse import parse_qs

MODE_CLI = 'cli'
MODE_SERVICE = 'service'

DEFAULT_TABLE = 'filter'


def detect_mode(environ: Optional[Mapping[str, str]] = None) -> str:
    """Service mode when a CGI gateway interface is present, CLI otherwise"""
    if environ is None:
        environ = os.environ
    return MODE_SERVICE if environ.get('GATEWAY_INTERFACE', '') else MODE_CLI


def build_parser(version: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='netgraph-server',
        description='Dump iptables chains, policies and counters as JSON',
        epilog='Note: Run with sudo/root to read the firewall tables',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--version', action='version',
                        version=f'netgraph-server {version}')

    parser.add_argument('--table', '-t', default=DEFAULT_TABLE,
                        help=f'Table to inspect (default: {DEFAULT_TABLE})')

    parser.add_argument('--chain', '-c', default=None,
                        help='Only show this chain (exact, case-sensitive name)')

    parser.add_argument('--compact', action='store_true',
                        help='Compact JSON output (default: pretty-print)')

    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging on stderr')
    return parser


@dataclass
class RunConfig:
    """Parameters of a single run"""
    table: str = DEFAULT_TABLE
    chain: Optional[str] = None
    compact: bool = False
    verbose: bool = False
    mode: str = MODE_CLI

    @classmethod
    def from_args(cls, argv: Optional[List[str]] = None, version: str = '') -> "RunConfig":
        """CLI mode configuration from command line arguments"""
        args = build_parser(version).parse_args(argv)
        return cls(
            table=args.table,
            chain=args.chain or None,
            compact=args.compact,
            verbose=args.verbose,
            mode=MODE_CLI,
        )

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "RunConfig":
        """Service mode configuration from a CGI request environment"""
        query = parse_qs(environ.get('QUERY_STRING', ''))
        table = query.get('table', [DEFAULT_TABLE])[0] or DEFAULT_TABLE
        chain = query.get('chain', [None])[0] or None
        return cls(
            table=table,
            chain=chain,
            compact=False,
            verbose=False,
            mode=MODE_SERVICE,
        )

    @classmethod
    def load(cls, argv: Optional[List[str]] = None,
             environ: Optional[Mapping[str, str]] = None,
             version: str = '') -> "RunConfig":
        """Pick the configuration source for this invocation"""
        if environ is None:
            environ = os.environ
        if detect_mode(environ) == MODE_SERVICE:
            return cls.from_environ(environ)
        return cls.from_args(argv, version=version)
