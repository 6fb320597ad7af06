"""Exception types for intake validation, session state, grouping and storage."""


class IntakeValidationError(ValueError):
    """Raised before any external call when the user input has nothing valid to submit."""


class EmptyBoxError(IntakeValidationError):
    """The lines entered for a mixed box parsed to nothing. The same box must be re-entered."""

    def __init__(self, box_index: int):
        self.box_index = box_index
        super().__init__(f"Box {box_index + 1} has no valid 'SKU quantity' lines")


class NoLineItemsError(IntakeValidationError):
    """Whole-box intake was submitted without a single valid line."""

    def __init__(self, message: str = "Enter at least one valid 'SKU boxes' line"):
        super().__init__(message)


class EmptySessionError(IntakeValidationError):
    """A completed mixed-box session carries no collected boxes."""

    def __init__(self, message: str = "Intake session has no collected boxes"):
        super().__init__(message)


class SessionStateError(ValueError):
    """Operation is not allowed in the session's current state."""


class NonContiguousGroupError(ValueError):
    """A mixed-box group key reappeared after its run of records had ended."""

    def __init__(self, group_key: str, position: int):
        self.group_key = group_key
        self.position = position
        super().__init__(
            f"Records of mixed box {group_key!r} are not contiguous (reappears at row {position})"
        )


class StorageError(RuntimeError):
    """The record storage collaborator failed or rejected a request."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"{message} (status {status_code})")


class RecordNotFoundError(StorageError):
    """No record exists with the given id."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record not found: {record_id}", status_code=404)


class RecordLockedError(StorageError):
    """Record is no longer pending, so it cannot be edited or deleted."""

    def __init__(self, record_id: str, status: str):
        self.record_id = record_id
        self.status = status
        super().__init__(f"Record {record_id} is {status}; only pending records can change", status_code=400)


class GroupNotFoundError(StorageError):
    """No record carries the given mixed-box group key."""

    def __init__(self, group_key: str):
        self.group_key = group_key
        super().__init__(f"Mixed box not found: {group_key}", status_code=404)


class GroupKeyConflictError(StorageError):
    """Pending records already carry the mixed-box group key being created."""

    def __init__(self, group_key: str):
        self.group_key = group_key
        super().__init__(f"Mixed box {group_key} already exists", status_code=409)
