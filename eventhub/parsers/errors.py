"""Errors raised while fetching or parsing a source."""


class SourceImportError(Exception):
    """Base class for failures importing a source."""


class SourceFetchError(SourceImportError):
    """The source URL could not be retrieved."""


class SourceParseError(SourceImportError):
    """The source content could not be understood as a calendar."""
