"""
NetGraph - iptables snapshot server

A Python package that reads Linux iptables tables through libiptc and
reports their chains, policies, counters and references as JSON, either from
the command line or as a CGI endpoint.

Modules:
    iptc_table: libiptc table access (CFFI)
    chain_info: builtin / user-defined chain classification
    result_tree: JSON response document builder
    traversal: chain and rule traversal
    server: CLI / CGI entry point

Example:
    >>> from netgraph.iptc_table import IptcTable
    >>> from netgraph.result_tree import ResultTree
    >>> from netgraph.traversal import traverse
    >>> tree = ResultTree()
    >>> with IptcTable('filter') as table:
    ...     traverse(table, tree)
"""

__version__ = "1.1.0"
__author__ = "Chris Wilson"
__license__ = "GPL-2.0-or-later"

# Import main modules for convenient access
from . import errors
from . import iptc_table
from . import chain_info
from . import result_tree
from . import traversal
from . import server

__all__ = [
    "errors",
    "iptc_table",
    "chain_info",
    "result_tree",
    "traversal",
    "server",
    "__version__",
]
