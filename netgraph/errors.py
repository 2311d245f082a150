"""
Failure taxonomy for netgraph.

Every failure that can end a run derives from NetgraphError and carries the
process exit status it maps to. The dispatcher in netgraph.server is the only
place these are caught.
"""

# xtables exit codes (enum xtables_exittype)
OTHER_PROBLEM = 1
RESOURCE_PROBLEM = 4


class NetgraphError(RuntimeError):
    """Base class for failures that end a run"""
    exit_status = OTHER_PROBLEM


class SetupFailure(NetgraphError):
    """The firewall subsystem (libiptc bindings) could not be initialized"""


class TableOpenFailure(NetgraphError):
    """The named table does not exist or cannot be opened"""


class NotFound(NetgraphError):
    """A chain filter matched no chain in the table"""


class TransientFailure(NetgraphError):
    """The table is temporarily busy; a caller may retry the whole run"""
    exit_status = RESOURCE_PROBLEM


class EnumerationFailure(NetgraphError):
    """Reading chain or rule data failed part way through"""


class ReferenceLookupError(LookupError):
    """A user chain's reference count could not be read (not fatal)"""
