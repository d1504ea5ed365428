"""Domain errors for food record storage and aggregation."""


class MacroTrackerError(Exception):
    """Base class for domain errors."""


class InvalidDateFormatError(MacroTrackerError):
    """Raised when a date string is not a valid YYYY-MM-DD calendar day."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Date must be in YYYY-MM-DD format, got {value!r}")
        self.value = value


class InvalidRecordKeyError(MacroTrackerError):
    """Raised when a composite record key cannot be parsed."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Malformed food record key: {key!r}")
        self.key = key


class InvalidRangeError(MacroTrackerError):
    """Raised when a range starts after it ends."""


class RangeTooLargeError(MacroTrackerError):
    """Raised when a range spans more days than allowed."""


class InvalidFoodRecordError(MacroTrackerError):
    """Raised when a food record payload fails validation."""


class FutureDateError(MacroTrackerError):
    """Raised when a record is logged for a day that has not happened yet."""


class StorageUnavailableError(MacroTrackerError):
    """Raised when the backing store fails an operation."""


class NotFoundError(MacroTrackerError):
    """Raised when no record exists at a key."""

    def __init__(self, key: str) -> None:
        super().__init__("Food record not found")
        self.key = key


class ForbiddenError(MacroTrackerError):
    """Raised when a caller targets a record owned by another user."""

    def __init__(self, key: str) -> None:
        super().__init__("You do not have permission to access this record")
        self.key = key
