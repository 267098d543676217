"""Exceptions raised by bsdmon collectors."""


class MonitorError(Exception):
    """Base class for all collector failures."""


class CollectError(MonitorError):
    """The kernel or OS interface was unreachable or returned a failure status."""


class ParseError(MonitorError):
    """A kernel data source did not match its expected format."""
