"""
Chain classification

A chain is either builtin (it has a default policy and policy counters) or
user-defined (other rules jump to it and it has a reference count). The kind is
decided once per chain by asking the table for a policy.
"""

from dataclasses import dataclass
import logging
from typing import Any, List, Optional, Tuple, Union

from netgraph.errors import ReferenceLookupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuiltinChain:
    """Builtin chain with its default policy and policy counters"""
    policy: str
    packets: int
    bytes: int


@dataclass(frozen=True)
class UserChain:
    """User-defined chain; refs is None when the count could not be read"""
    refs: Optional[int] = None


ChainKind = Union[BuiltinChain, UserChain]


def classify(table, chain: str) -> ChainKind:
    """
    Determine the kind of one chain.

    Args:
        table: an open table source (see netgraph.iptc_table.IptcTable)
        chain: chain name

    Returns:
        BuiltinChain when the chain has a non-empty policy, UserChain otherwise
    """
    policy = table.get_policy(chain)
    if policy and policy[0]:
        name, packets, nbytes = policy
        return BuiltinChain(policy=name, packets=packets, bytes=nbytes)

    try:
        refs = table.get_references(chain)
    except ReferenceLookupError as e:
        logger.debug("no reference count for %s: %s", chain, e)
        return UserChain()
    return UserChain(refs=refs)


def chain_fields(kind: ChainKind) -> List[Tuple[str, Any]]:
    """Ordered JSON members describing a chain kind"""
    if isinstance(kind, BuiltinChain):
        return [
            ('type', 'builtin'),
            ('policy', kind.policy),
            ('packets', kind.packets),
            ('bytes', kind.bytes),
        ]
    if isinstance(kind, UserChain):
        fields = [('type', 'user')]
        if kind.refs is not None:
            fields.append(('refs', kind.refs))
        return fields
    raise TypeError(f"Unknown chain kind: {kind!r}")
