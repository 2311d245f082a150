#!/usr/bin/env python3
"""
Example: Basic usage of the netgraph package

Demonstrates two ways of reading an iptables table from Python:
  - Pattern 1: Full document (what netgraph-server prints)
  - Pattern 2: Direct table queries, one chain at a time

Both patterns open the table in a ``with`` block, so the libiptc handle is
released even when a query fails.
"""

import sys


def pattern1_document():
    """Pattern 1: Build the same JSON document as netgraph-server"""
    print("\nPattern 1: Full Document")
    print("-" * 70)

    from netgraph.iptc_table import IptcTable
    from netgraph.result_tree import ResultTree
    from netgraph.traversal import traverse

    tree = ResultTree()
    with IptcTable('filter') as table:
        result = traverse(table, tree)

    print(f"Found {result.chain_count} chains")
    print(tree.serialize())


def pattern2_chain_queries():
    """Pattern 2: Classify chains and count their rules yourself"""
    print("\nPattern 2: Direct Chain Queries")
    print("-" * 70)

    from netgraph.chain_info import BuiltinChain, UserChain, classify
    from netgraph.iptc_table import IptcTable

    with IptcTable('filter') as table:
        for chain in table.chains():
            kind = classify(table, chain)
            rules = sum(1 for _ in table.rules(chain))

            if isinstance(kind, BuiltinChain):
                print(f"  {chain}: policy {kind.policy}, {rules} rules, "
                      f"{kind.packets} packets / {kind.bytes} bytes")
            elif isinstance(kind, UserChain):
                refs = 'unknown' if kind.refs is None else kind.refs
                print(f"  {chain}: user chain, {rules} rules, {refs} references")


def main():
    print("NetGraph Package Usage Examples")
    print("=" * 70)

    from netgraph.errors import NetgraphError

    try:
        pattern1_document()
        pattern2_chain_queries()

        print("\n" + "=" * 70)
        print("✓ All patterns demonstrated successfully!")

    except NetgraphError as e:
        print(f"\n✗ {e}")
        print("  Reading iptables tables requires root privileges")
        print("  Run with: sudo python3 examples/basic_usage.py")
        sys.exit(e.exit_status)
    except ImportError as e:
        print(f"\n✗ Import error: {e}")
        print("  Install netgraph package first: pip install .")
        sys.exit(1)


if __name__ == '__main__':
    main()
