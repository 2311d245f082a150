"""
Table traversal

Walks every chain of an open table (or the single chain named by a filter),
classifies it and writes one summary per chain under ``chains`` in the result
document.
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Optional

from netgraph.chain_info import chain_fields, classify
from netgraph.errors import NotFound
from netgraph.result_tree import ObjectScope

logger = logging.getLogger(__name__)


@dataclass
class TraversalResult:
    """Outcome of a successful traversal"""
    found: bool = False
    rule_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def chain_count(self) -> int:
        return len(self.rule_counts)


def traverse(table, tree: ObjectScope, chain: Optional[str] = None) -> TraversalResult:
    """
    Populate ``tree['chains']`` from a table.

    Args:
        table: an open table source (see netgraph.iptc_table.IptcTable)
        tree: document (or object scope) that receives the ``chains`` member
        chain: optional exact, case-sensitive chain name to restrict output to

    Returns:
        TraversalResult with the per-chain rule counts in traversal order

    Raises:
        NotFound: no chain matched (``chains`` is left present and empty)
        NetgraphError: any failure reported by the table source; chains
            already written stay in the document
    """
    result = TraversalResult()

    with tree.object('chains') as chains:
        for name in table.chains():
            if chain is not None and name != chain:
                continue

            with chains.object(name) as summary:
                for key, value in chain_fields(classify(table, name)):
                    summary.add(key, value)

                # Rule contents are not decoded; the array stays empty
                with summary.array('rules'):
                    count = 0
                    for _position in table.rules(name):
                        count += 1

            result.rule_counts[name] = count
            result.found = True
            logger.debug("chain %s: %d rules", name, count)

    if not result.found:
        if chain is not None:
            raise NotFound(f"{chain}: No chain/target/match by that name")
        raise NotFound(f"table '{table.name}' has no chains")

    return result
