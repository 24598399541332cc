"""Exception types raised by the layout engine and its collaborators."""

from typing import Optional


class IlotPlanError(Exception):
    """Base exception for ilotplan errors."""

    def __init__(self, message: str, error_type: str = "unknown"):
        super().__init__(message)
        self.error_type = error_type


class RecordNotFoundError(IlotPlanError):
    """A record the analysis run depends on is missing from the store."""

    def __init__(self, record_type: str, record_id: str):
        super().__init__(f"{record_type.capitalize()} not found: {record_id}", error_type="not_found")
        self.record_type = record_type
        self.record_id = record_id


class DrawingReadError(IlotPlanError):
    """A drawing file exists but could not be read as DXF."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, error_type="drawing_read")
        self.path = path
