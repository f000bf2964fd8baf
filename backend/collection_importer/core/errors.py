"""
Error taxonomy for collection imports.

Read errors are plain ``OSError`` and are not part of this hierarchy.
Mapping degradations (unknown auth type, unknown body MIME type, malformed
embedded GraphQL) are never raised at all.
"""


class CollectionImportError(Exception):
    """Base class for every error an import reports to its caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ImportParseError(CollectionImportError):
    """The file content is neither valid JSON nor valid YAML."""

    def __init__(self, message: str = "file is neither valid JSON nor valid YAML"):
        super().__init__(message)


class ImportStructureError(CollectionImportError):
    """The export has no workspace, or its resource hierarchy is unusable."""


class CollectionSchemaError(CollectionImportError):
    """The converted document failed schema validation."""


class ImportFailedError(CollectionImportError):
    """Generic import failure wrapping an I/O or downstream error."""

    PREFIX = "Import collection failed"

    def __init__(self, detail: str | None = None):
        message = f"{self.PREFIX}: {detail}" if detail else self.PREFIX
        super().__init__(message)
