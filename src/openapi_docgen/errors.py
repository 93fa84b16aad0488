"""Exceptions raised by the generation pipeline.

Only conditions that would produce wrong output are raised. Gaps that merely
omit a piece of information (missing definitions, stale links) are logged and
reported instead.
"""


class DocgenError(Exception):
    """Base class for every error raised by openapi_docgen."""


class ConfigError(DocgenError):
    """A configuration value is present but cannot be used."""


class IngestionError(DocgenError):
    """The endpoint source could not be fetched or has the wrong shape."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status
