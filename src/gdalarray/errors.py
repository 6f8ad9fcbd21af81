"""Custom exception hierarchy for gdalarray."""

from typing import Optional


class GdalArrayError(Exception):
    """Base exception for gdalarray library."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class DatasetOpenError(GdalArrayError):
    """GDAL could not open a dataset."""
    pass


class ValidationError(GdalArrayError):
    """Data validation errors."""
    pass


class InconsistentBandsError(ValidationError):
    """Bands of one dataset disagree on data type or resolution."""
    pass


class BufferSizeError(ValidationError):
    """A buffer returned by GDAL does not match the requested window."""
    pass


class ParseError(GdalArrayError):
    """Metadata parsing errors."""
    pass


class SubdatasetMetadataError(ParseError):
    """Malformed SUBDATASETS metadata entry."""
    pass


class ConfigurationError(GdalArrayError):
    """Configuration and setup errors."""
    pass
