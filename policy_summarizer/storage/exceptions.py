class StorageError(Exception):
    """Base exception for all storage-related errors."""


class DocumentNotFoundError(StorageError):
    """Raised when a document or summary version cannot be found."""
