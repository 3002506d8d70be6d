"""Domain exceptions rendered by the API exception handler"""

from typing import Optional


class CareQueueError(Exception):
    """Base class for errors surfaced to the API caller"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(CareQueueError):
    """Bad input range, e.g. a timestamp in the past"""

    status_code = 400


class NotFoundError(CareQueueError):
    status_code = 404

    def __init__(self, resource: str, resource_id: Optional[int] = None):
        message = f"{resource} not found" if resource_id is None else f"{resource} {resource_id} not found"
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class AssignmentError(CareQueueError):
    """Manual staff selection rejected by the assignment engine"""

    status_code = 400

    STAFF_UNAVAILABLE = "StaffUnavailable"
    STAFF_AT_CAPACITY = "StaffAtCapacity"
    TYPE_MISMATCH = "TypeMismatch"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind}


class ConflictError(CareQueueError):
    """Concurrent capacity race lost, or a referenced record cannot be removed"""

    status_code = 409
