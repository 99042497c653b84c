class ESignError(Exception):
    """Base class for errors raised by the signature-request engine."""


class UploadRejected(ESignError):
    """The uploaded file cannot be used as the document to sign."""

    def __init__(self, message: str, too_large: bool = False):
        super().__init__(message)
        self.too_large = too_large


class DispatchError(ESignError):
    """Expected failure reported by a dispatch collaborator."""
