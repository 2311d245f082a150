"""
Shared fixtures: an in-memory table source standing in for libiptc
"""

import pytest

from netgraph.errors import ReferenceLookupError


class FakeTable:
    """
    In-memory table with the same interface as netgraph.iptc_table.IptcTable.

    Each chain is a dict with 'name', and either 'policy' as
    (policy, packets, bytes) or 'refs' (None makes the lookup fail), plus
    'rules' as a rule count. fail_at raises fail_error when chain enumeration
    reaches that chain; rule_fail_at=(chain, position) raises it from rules().
    """

    def __init__(self, chains, name='filter', open_error=None, fail_at=None,
                 fail_error=None, rule_fail_at=None):
        self.name = name
        self._chains = list(chains)
        self.open_error = open_error
        self.fail_at = fail_at
        self.fail_error = fail_error
        self.rule_fail_at = rule_fail_at
        self.enter_count = 0
        self.exit_count = 0
        self.reference_queries = []

    def __call__(self, name):
        # Lets the instance be passed as run()'s table_factory
        self.name = name
        return self

    def __enter__(self):
        self.enter_count += 1
        if self.open_error is not None:
            raise self.open_error
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.exit_count += 1
        return False

    def _chain(self, name):
        for chain in self._chains:
            if chain['name'] == name:
                return chain
        raise KeyError(name)

    def chains(self):
        for chain in self._chains:
            if chain['name'] == self.fail_at:
                raise self.fail_error
            yield chain['name']

    def get_policy(self, chain):
        return self._chain(chain).get('policy')

    def get_references(self, chain):
        self.reference_queries.append(chain)
        refs = self._chain(chain).get('refs')
        if refs is None:
            raise ReferenceLookupError(f"{chain}: no such chain")
        return refs

    def rules(self, chain):
        for position in range(1, self._chain(chain).get('rules', 0) + 1):
            if (chain, position) == self.rule_fail_at:
                raise self.fail_error
            yield position


@pytest.fixture
def example_chains():
    """filter table with INPUT (ACCEPT, 10 rules) and LOGDROP (2 refs)"""
    return [
        {'name': 'INPUT', 'policy': ('ACCEPT', 120, 9600), 'rules': 10},
        {'name': 'FORWARD', 'policy': ('DROP', 0, 0), 'rules': 0},
        {'name': 'OUTPUT', 'policy': ('ACCEPT', 77, 5120), 'rules': 3},
        {'name': 'LOGDROP', 'refs': 2, 'rules': 2},
    ]


@pytest.fixture
def fake_table(example_chains):
    return FakeTable(example_chains)


@pytest.fixture
def make_table():
    return FakeTable
