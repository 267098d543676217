"""Minimal ctypes binding for sysctlbyname(3).

Only the read side is needed. Every read allocates its own buffer sized by a
first, size-only query and lets it go out of scope when the call returns.
"""

import ctypes
import ctypes.util
import errno
import logging
import os
import struct
import sys
from collections.abc import Callable

from bsdmon.errors import CollectError, ParseError

logger = logging.getLogger(__name__)

SysctlFunc = Callable[..., int]


def _load_sysctlbyname() -> SysctlFunc:
    """Resolve sysctlbyname from the C library."""
    path = ctypes.util.find_library("c")
    try:
        libc = ctypes.CDLL(path, use_errno=True)
    except OSError as exc:
        raise CollectError(f"cannot load C library: {exc}") from exc

    try:
        func = libc.sysctlbyname
    except AttributeError as exc:
        raise CollectError("sysctlbyname is not available on this platform") from exc

    func.argtypes = [
        ctypes.c_char_p,
        ctypes.c_void_p,
        ctypes.POINTER(ctypes.c_size_t),
        ctypes.c_void_p,
        ctypes.c_size_t,
    ]
    func.restype = ctypes.c_int
    return func


class SysctlReader:
    """Reads kernel state through sysctlbyname(3)."""

    def __init__(self, func: SysctlFunc | None = None) -> None:
        """
        Initialize the reader.

        Args:
            func: Callable with the sysctlbyname signature. Resolved from libc
                on first use when not given.
        """
        self._func = func

    def _sysctlbyname(self) -> SysctlFunc:
        if self._func is None:
            self._func = _load_sysctlbyname()
        return self._func

    def read(self, name: str) -> bytes:
        """
        Read the raw value of a sysctl node.

        The size is queried first, then a buffer of exactly that size is
        filled. The two calls are not atomic: if the value grows in between
        (e.g. a CPU comes online), the kernel answers ENOMEM and the read
        fails rather than returning a truncated array.
        """
        func = self._sysctlbyname()
        key = name.encode()

        size = ctypes.c_size_t(0)
        if func(key, None, ctypes.pointer(size), None, 0) != 0:
            raise self._error(name, "size query")

        buf = ctypes.create_string_buffer(size.value)
        if func(key, buf, ctypes.pointer(size), None, 0) != 0:
            raise self._error(name, "read")

        return buf.raw[: size.value]

    def read_uint(self, name: str) -> int:
        """Read an unsigned integer node (u_int or u_long)."""
        raw = self.read(name)
        if len(raw) not in (4, 8):
            raise ParseError(f"sysctl {name}: unexpected integer width {len(raw)}")
        return int.from_bytes(raw, sys.byteorder, signed=False)

    def read_long_array(self, name: str) -> list[int]:
        """Read a node holding an array of C longs."""
        raw = self.read(name)
        width = struct.calcsize("l")
        count = len(raw) // width
        if len(raw) % width:
            logger.debug("sysctl %s: ignoring %d trailing bytes", name, len(raw) % width)
        return list(struct.unpack(f"{count}l", raw[: count * width]))

    @staticmethod
    def _error(name: str, stage: str) -> CollectError:
        err = ctypes.get_errno()
        if err == errno.ENOMEM:
            detail = "buffer too small, value changed size between calls"
        else:
            detail = os.strerror(err) if err else "unknown error"
        return CollectError(f"sysctl {name} ({stage}) failed: {detail}")
