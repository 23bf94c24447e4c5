"""Haulpay exception hierarchy."""

from __future__ import annotations


class HaulpayError(Exception):
    """Base exception for all Haulpay errors."""


class UnsupportedFormatError(HaulpayError):
    """Import file extension is not a supported tabular format."""

    def __init__(self, filename: str, supported: tuple[str, ...]) -> None:
        self.filename = filename
        self.supported = supported
        super().__init__(
            f"Unsupported import file {filename!r}; expected one of: {', '.join(supported)}"
        )


class ImportReadError(HaulpayError):
    """Import file could not be read or parsed."""


class StorageError(HaulpayError):
    """Fuel transaction or employee store operation failed."""


class CacheError(HaulpayError):
    """Key-value backend operation failed."""


class UnknownFieldError(HaulpayError, KeyError):
    """Field name is not one of the logical fuel import fields."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Unknown fuel import field: {field!r}")

    def __str__(self) -> str:
        return self.args[0]


class PipelineStateError(HaulpayError):
    """Import pipeline used outside its allowed lifecycle."""


class ImportJobNotFoundError(HaulpayError):
    """No background import job with the given id."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Import job not found: {job_id}")
