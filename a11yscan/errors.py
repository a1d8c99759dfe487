"""Exception types raised by the scanner services."""


class A11yScanError(Exception):
    """Base error carrying a stable reason code."""

    code = "a11yscan_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class ValidationError(A11yScanError):
    """Request rejected before any work was done."""

    code = "invalid_request"


class InvalidExportFormatError(ValidationError):
    code = "invalid_export_format"


class NotFoundError(A11yScanError):
    code = "not_found"


class ScanSessionNotFoundError(NotFoundError):
    """Scan session is unknown or its TTL has passed; restart the scan."""

    code = "scan_not_found"


class FindingNotFoundError(NotFoundError):
    code = "finding_not_found"


class StorageError(A11yScanError):
    """The issue store failed to read or write."""

    code = "storage_failure"


class ExportNotImplementedError(A11yScanError):
    """Recognized export format without an implementation."""

    code = "export_not_implemented"
