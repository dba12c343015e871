class DatasetPreviewError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidSchemaPayloadError(DatasetPreviewError):
    """Explicit schema payload is neither a field list nor wraps one."""


class PaginationError(DatasetPreviewError):
    """Page size or page index outside the accepted range."""
