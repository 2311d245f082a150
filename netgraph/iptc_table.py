#!/usr/bin/env python3
"""
IPv4 firewall table access through libiptc via CFFI

Opens one netfilter table (filter, nat, mangle, raw, ...) and exposes the
read-only queries netgraph needs:
- Chain enumeration in kernel order
- Builtin chain policy with its packet/byte counters
- User chain reference counts
- Rule enumeration (positions only, rule contents are not decoded)

Requirements:
    - Python 3.8+
    - cffi>=1.0.0
    - setuptools (required for Python 3.12+)
    - libiptc development headers (iptables-dev / iptables-devel)

The C helper library is compiled, and xtables initialized (loading the
ip_tables module when it is missing), the first time a table is opened, not at
import time, so the rest of the package can be used on hosts without the
iptables headers.
"""

from cffi import FFI
import errno
import logging
import sys
from typing import Iterator, Optional, Tuple

from netgraph.errors import (
    EnumerationFailure,
    ReferenceLookupError,
    SetupFailure,
    TableOpenFailure,
    TransientFailure,
)

logger = logging.getLogger(__name__)

# C library source code - thin wrappers around libiptc
C_SOURCE = r"""
#include <stdlib.h>
#include <string.h>
#include <errno.h>
#include <stdbool.h>
#include <xtables.h>
#include <libiptc/libiptc.h>

static struct xtables_globals ng_globals = {
    .option_offset = 0,
    .program_name = "netgraph",
    .program_version = XTABLES_VERSION,
};

static int ng_setup_done = 0;

// Initialize xtables and load the ip_tables module if needed; 0 on success
int ng_setup(void) {
    if (ng_setup_done) {
        return 0;
    }
    if (xtables_init_all(&ng_globals, NFPROTO_IPV4) != 0) {
        return -1;
    }
    xtables_load_ko(xtables_modprobe_program, false);
    ng_setup_done = 1;
    return 0;
}

// Open a table; errno is reported through err_out on failure
void* ng_init(const char* table, int* err_out) {
    struct xtc_handle* handle;

    errno = 0;
    handle = iptc_init(table);
    *err_out = handle ? 0 : errno;
    return handle;
}

void ng_free(void* handle) {
    if (handle) {
        iptc_free((struct xtc_handle*)handle);
    }
}

const char* ng_first_chain(void* handle) {
    return iptc_first_chain((struct xtc_handle*)handle);
}

const char* ng_next_chain(void* handle) {
    return iptc_next_chain((struct xtc_handle*)handle);
}

// Returns 1 and fills the outputs for a builtin chain, 0 otherwise
int ng_get_policy(void* handle, const char* chain, const char** policy_out,
                  unsigned long long* packets_out, unsigned long long* bytes_out) {
    struct xt_counters counters;
    const char* policy;

    memset(&counters, 0, sizeof(counters));
    policy = iptc_get_policy(chain, &counters, (struct xtc_handle*)handle);
    if (!policy) {
        return 0;
    }

    *policy_out = policy;
    *packets_out = counters.pcnt;
    *bytes_out = counters.bcnt;
    return 1;
}

// Returns 1 on success, 0 on failure with errno in err_out
int ng_get_references(void* handle, const char* chain, unsigned int* refs_out,
                      int* err_out) {
    errno = 0;
    if (!iptc_get_references(refs_out, chain, (struct xtc_handle*)handle)) {
        *err_out = errno;
        return 0;
    }
    *err_out = 0;
    return 1;
}

const void* ng_first_rule(void* handle, const char* chain) {
    return iptc_first_rule(chain, (struct xtc_handle*)handle);
}

const void* ng_next_rule(void* handle, const void* prev) {
    return iptc_next_rule((const struct ipt_entry*)prev, (struct xtc_handle*)handle);
}

const char* ng_strerror(int err) {
    return iptc_strerror(err);
}
"""

CDEF = """
int ng_setup(void);
void* ng_init(const char* table, int* err_out);
void ng_free(void* handle);
const char* ng_first_chain(void* handle);
const char* ng_next_chain(void* handle);
int ng_get_policy(void* handle, const char* chain, const char** policy_out,
                  unsigned long long* packets_out, unsigned long long* bytes_out);
int ng_get_references(void* handle, const char* chain, unsigned int* refs_out,
                      int* err_out);
const void* ng_first_rule(void* handle, const char* chain);
const void* ng_next_rule(void* handle, const void* prev);
const char* ng_strerror(int err);
"""

ffi = FFI()
ffi.cdef(CDEF)

_lib = None


def load_lib():
    """Compile (or reuse the cached build of) the libiptc helper library"""
    global _lib
    if _lib is not None:
        return _lib

    # For Python 3.12+, verify setuptools is available
    if sys.version_info >= (3, 12):
        try:
            import setuptools  # @UnusedImport
        except ImportError as e:
            raise SetupFailure(
                "Python 3.12+ requires setuptools for CFFI. "
                "Install it with: pip install setuptools"
            ) from e

    try:
        _lib = ffi.verify(C_SOURCE, modulename="netgraph_iptc_v1",
                          libraries=["ip4tc", "xtables"])
    except Exception as e:
        logger.debug("libiptc helper build failed", exc_info=True)
        raise SetupFailure(f"failed to build libiptc helper: {e}") from e
    return _lib


def strerror(lib, err: int) -> str:
    """libiptc's description of an errno value"""
    message = ffi.string(lib.ng_strerror(err)).decode('utf-8', 'replace')
    if err == errno.EINVAL:
        message += ". Run `dmesg' for more information"
    return message


def decode_chain(raw) -> str:
    """Chain name as text; names that are not UTF-8 cannot be queried back"""
    name = ffi.string(raw)
    try:
        return name.decode('utf-8')
    except UnicodeDecodeError as e:
        raise EnumerationFailure(f"chain name {name!r} is not valid UTF-8") from e


class IptcTable:
    """
    One opened iptables table.

    Use as a context manager: the libiptc handle is created on entry and
    freed exactly once on exit, whether the body returns or raises.
    """

    def __init__(self, name: str = 'filter', lib=None):
        self.name = name
        self._lib = lib
        self._handle = None

    def __enter__(self):
        """Context manager entry - open the table"""
        if self._lib is None:
            self._lib = load_lib()

        if self._lib.ng_setup() != 0:
            raise SetupFailure("failed to initialize xtables")

        err = ffi.new("int*")
        handle = self._lib.ng_init(self.name.encode('utf-8'), err)
        if handle == ffi.NULL:
            message = (f"failed to initialize iptables table '{self.name}': "
                       f"{strerror(self._lib, err[0])}")
            if err[0] == errno.EAGAIN:
                raise TransientFailure(message)
            raise TableOpenFailure(message)

        self._handle = handle
        logger.debug("opened table %s", self.name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb): #@UnusedVariable
        """Context manager exit - free the handle"""
        if self._handle is not None:
            self._lib.ng_free(self._handle)
            self._handle = None
            logger.debug("closed table %s", self.name)
        return False

    def _require_open(self):
        if self._handle is None:
            raise EnumerationFailure(f"table '{self.name}' is not open")
        return self._handle

    def chains(self) -> Iterator[str]:
        """Yield chain names in the kernel's order"""
        handle = self._require_open()
        chain = self._lib.ng_first_chain(handle)
        while chain != ffi.NULL:
            yield decode_chain(chain)
            handle = self._require_open()
            chain = self._lib.ng_next_chain(handle)

    def get_policy(self, chain: str) -> Optional[Tuple[str, int, int]]:
        """
        Policy of a builtin chain.

        Returns:
            (policy, packets, bytes), or None for a user-defined chain
        """
        handle = self._require_open()
        policy = ffi.new("const char**")
        packets = ffi.new("unsigned long long*")
        nbytes = ffi.new("unsigned long long*")

        if not self._lib.ng_get_policy(handle, chain.encode('utf-8'),
                                       policy, packets, nbytes):
            return None
        return ffi.string(policy[0]).decode('utf-8', 'replace'), packets[0], nbytes[0]

    def get_references(self, chain: str) -> int:
        """Number of jumps into a user-defined chain"""
        handle = self._require_open()
        refs = ffi.new("unsigned int*")
        err = ffi.new("int*")

        if not self._lib.ng_get_references(handle, chain.encode('utf-8'),
                                           refs, err):
            raise ReferenceLookupError(
                f"{chain}: {strerror(self._lib, err[0])}")
        return refs[0]

    def rules(self, chain: str) -> Iterator[int]:
        """Yield the 1-based position of each rule in a chain"""
        handle = self._require_open()
        name = chain.encode('utf-8')
        rule = self._lib.ng_first_rule(handle, name)
        position = 0
        while rule != ffi.NULL:
            position += 1
            yield position
            handle = self._require_open()
            rule = self._lib.ng_next_rule(handle, rule)
