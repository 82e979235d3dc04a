# =============================================================================
# Custom Exceptions for Crew Rotation Engine
# =============================================================================

class RotaError(Exception):
    """Base exception class for the crew rotation engine."""
    pass

class DataValidationError(RotaError):
    """Raised when data validation fails."""
    pass

class ConfigurationError(RotaError):
    """Raised when configuration is invalid."""
    pass

class FileOperationError(RotaError):
    """Raised when file operations fail."""
    pass

class DateRangeError(RotaError):
    """Raised when a year/month pair is not a valid calendar month."""
    pass
