"""Exception types raised inside the search subsystem.

None of these escape to the host application through the session
controller: storage failures degrade history to empty, malformed markup
falls back to raw text.
"""


class KnowledgeSearchError(Exception):
    """Base class for all knowledge search errors."""


class StorageError(KnowledgeSearchError):
    """The persistence medium rejected an operation."""

    def __init__(self, message: str, key: str = "") -> None:
        super().__init__(message)
        self.key = key


class StorageUnavailableError(StorageError):
    """The persistence medium cannot be used at all (e.g. private browsing)."""


class StorageQuotaExceededError(StorageError):
    """A write would exceed the medium's quota."""


class HistoryCorruptError(KnowledgeSearchError):
    """A persisted history value could not be decoded."""


class MalformedMarkupError(KnowledgeSearchError):
    """Markup could not be parsed into text."""
