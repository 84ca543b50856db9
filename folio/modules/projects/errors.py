"""
Failure taxonomy for the project editing flow.

Every failure is caught at the operation that produced it and turned into
one user-visible notification; none of them is fatal.
"""


class FolioError(Exception):
    """Base class for project editing failures"""


class ValidationFailure(FolioError):
    """One or more fields violate the project schema"""

    def __init__(self, field_errors):
        self.field_errors = dict(field_errors)
        message = '; '.join(f'{field}: {msg}' for field, msg in self.field_errors.items())
        super().__init__(message or 'Invalid project data')


class LoadFailure(FolioError):
    """The project record could not be read"""


class CodecFailure(FolioError):
    """An image could not be decoded or re-encoded"""


class UploadConstraintFailure(FolioError):
    """An uploaded file is too large or of a type we do not accept"""

    def __init__(self, title, message):
        self.title = title
        super().__init__(message)


class GenerationFailure(FolioError):
    """The image generation service did not produce an image"""

    CREDENTIALS = 'credentials'
    SERVICE = 'service'

    def __init__(self, message, kind=SERVICE):
        self.kind = kind
        super().__init__(message)


class PersistFailure(FolioError):
    """The update call returned a structured failure"""


class OperationInProgress(FolioError):
    """Another edit operation is still in flight"""
