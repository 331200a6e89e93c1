# ABOUTME: Error taxonomy and collaborator protocols for page extraction
# ABOUTME: Every extraction error remembers the structural stage it was raised in

from typing import Any, Protocol


class Fetcher(Protocol):
    """Protocol for fetching page and image bytes. Repeated calls for one URL return identical bytes."""

    def get(self, url: str, document: bool) -> bytes:
        """Fetch the given URL.

        Args:
            url: Absolute URL to fetch
            document: True for HTML pages, False for images

        Returns:
            Raw response body

        Raises:
            FetchError: On a non-success response or I/O failure
        """
        ...


class ImageCache(Protocol):
    """Protocol for storing images locally. The same image always yields the same identifier."""

    def get(self, url: str) -> str:
        """Fetch (or reuse) the image at ``url`` and return its cache identifier."""
        ...


class ExtractionError(Exception):
    """Raised when a page does not match the layout the extractor depends on."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.stages: list[str] = []

    def within(self, stage: str) -> "ExtractionError":
        """Record an enclosing stage; outermost stages end up first."""
        self.stages.insert(0, stage)
        return self

    def __str__(self) -> str:
        if not self.stages:
            return self.message
        return f"{' > '.join(self.stages)}: {self.message}"


class StructuralMismatch(ExtractionError):
    """A layout invariant did not hold. Never retried: the page changed or the extractor is wrong."""

    pass


class MissingElement(StructuralMismatch):
    """An expected element was not found."""

    def __init__(self, what: str, where: str):
        super().__init__(f"missing {what} (looked for {where})")
        self.what = what
        self.where = where


class UnexpectedShape(StructuralMismatch):
    """An element was found but its shape (usually a child count) was wrong."""

    def __init__(self, what: str, expected: Any, actual: Any):
        super().__init__(f"unexpected {what}: expected {expected}, got {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class ParseFailure(ExtractionError):
    """A field's raw text did not parse as its expected type."""

    def __init__(self, field: str, raw: str):
        super().__init__(f"could not parse {field} from {raw!r}")
        self.field = field
        self.raw = raw


class DownstreamFailure(ExtractionError):
    """A fetch, cache, or resolver error surfaced while extracting."""

    def __init__(self, context: str, cause: BaseException):
        super().__init__(f"{context}: {cause}")
        self.context = context
        self.cause = cause
