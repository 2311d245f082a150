"""
Append-only JSON document builder

Nested objects and arrays are opened with ``with`` blocks, so every scope is
closed before its parent. A nested container is attached to its parent as soon
as it is opened: if a run fails half way, whatever was added so far stays in
the document, and the document still serializes to valid JSON.

Example:
    >>> tree = ResultTree()
    >>> with tree.object('chains') as chains:
    ...     with chains.object('INPUT') as chain:
    ...         chain.add('type', 'builtin')
    >>> tree.serialize(compact=True)
"""

from contextlib import contextmanager
import json
from typing import Any, Dict, Iterator, List

PROTOCOL = "netgraph"
APP = "netgraph-server"
PROTOCOL_VERSION = (1, 1)


def _check_scalar(value):
    # bool is a subclass of int but is not a valid member here
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"Only str and int values are allowed, got {type(value).__name__}")
    return value


class _Scope:
    def __init__(self, container):
        self._container = container
        self._open = True
        self._child_open = False

    def _writable(self):
        if not self._open:
            raise RuntimeError("Scope is already closed")
        if self._child_open:
            raise RuntimeError("A nested scope is still open")

    @contextmanager
    def _nested(self, scope):
        self._child_open = True
        try:
            yield scope
        finally:
            scope._open = False
            self._child_open = False


class ArrayScope(_Scope):
    """An open JSON array"""

    def append(self, value) -> None:
        self._writable()
        self._container.append(_check_scalar(value))

    def __len__(self):
        return len(self._container)


class ObjectScope(_Scope):
    """An open JSON object"""

    def add(self, name: str, value) -> None:
        """Add a string or integer member"""
        self._writable()
        self._container[name] = _check_scalar(value)

    def object(self, name: str) -> Iterator["ObjectScope"]:
        """Open a nested object member"""
        self._writable()
        child: Dict[str, Any] = {}
        self._container[name] = child
        return self._nested(ObjectScope(child))

    def array(self, name: str) -> Iterator[ArrayScope]:
        """Open a nested array member"""
        self._writable()
        child: List[Any] = []
        self._container[name] = child
        return self._nested(ArrayScope(child))

    def __contains__(self, name):
        return name in self._container


class ResultTree(ObjectScope):
    """
    The response document.

    protocol, app and version are always present. chains is added by the
    traversal and error only on the failure path.
    """

    def __init__(self):
        super().__init__({})
        self.add('protocol', PROTOCOL)
        self.add('app', APP)
        with self.array('version') as version:
            for part in PROTOCOL_VERSION:
                version.append(part)

    def set_error(self, message: str) -> None:
        """Record the failure message (first one wins)"""
        if 'error' not in self._container:
            self.add('error', str(message))

    @property
    def error(self):
        return self._container.get('error')

    def to_dict(self) -> Dict[str, Any]:
        return self._container

    def serialize(self, compact: bool = False) -> str:
        """Render the document as JSON text"""
        if self._child_open:
            raise RuntimeError("Cannot serialize while a nested scope is open")
        if compact:
            return json.dumps(self._container, separators=(',', ':'))
        return json.dumps(self._container, indent=2, sort_keys=False)
