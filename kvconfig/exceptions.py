"""
Exceptions raised by kv-config.

All errors are synchronous: they are raised from the call that detected
the problem and are never retried by this package.
"""

from typing import Optional


class KVConfigError(Exception):
    """Base class for all kv-config errors."""


class TopologyConflict(KVConfigError):
    """
    Raised when a second, different topology is requested on a config.

    Attributes:
        selected: The topology kind already chosen for the config
        requested: The topology kind the caller tried to select
    """

    def __init__(self, selected, requested):
        self.selected = selected
        self.requested = requested
        super().__init__(
            f"{selected.label} config already used, "
            f"cannot switch to {requested.label}"
        )


class ConfigParseError(KVConfigError, ValueError):
    """
    Raised when a configuration document cannot be turned into a config.

    Covers syntax errors reported by the JSON/YAML parsers as well as
    documents that parse but describe an invalid configuration.

    Attributes:
        line: 1-based line of the problem, if the parser reported one
        column: 1-based column of the problem, if the parser reported one
        source: Short description of where the document came from
    """

    def __init__(
            self,
            message: str,
            line: Optional[int] = None,
            column: Optional[int] = None,
            source: Optional[str] = None,
    ):
        self.line = line
        self.column = column
        self.source = source
        self.reason = message
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        where = []
        if self.source:
            where.append(self.source)
        if self.line is not None:
            where.append(f"line {self.line}")
            if self.column is not None:
                where.append(f"column {self.column}")
        if where:
            return f"{message} ({', '.join(where)})"
        return message

    def with_source(self, source: str) -> "ConfigParseError":
        """Return a copy of this error tagged with the given source."""
        return ConfigParseError(self.reason, self.line, self.column, source)
