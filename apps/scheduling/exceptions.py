"""
Error taxonomy for board operations.

Every error raised by AssignmentService derives from SchedulingError and
carries a machine-readable `code` plus an HTTP status used by core.api.JsonView.

  ValidationError     malformed input, rejected before any write
  ReferenceNotFound   assign/edit names a staff member or category that is gone
  NotFoundOnMutation  update/delete targeted a row that does not exist
  LastCategoryError   refusing to delete the only remaining category
  StoreUnavailable    the database failed; callers must reload, never retry
"""


class SchedulingError(Exception):
    """Base class for all board errors."""

    code = "scheduling_error"
    status = 400

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def as_dict(self) -> dict:
        payload = {"error": self.message, "code": self.code}
        if self.context:
            payload.update(self.context)
        return payload


class ValidationError(SchedulingError):
    """
    Input failed validation.

    `fields` maps a field name to a list of messages, mirroring Django's
    ValidationError.message_dict.
    """

    code = "validation_error"
    status = 400

    def __init__(self, message: str = "Invalid input.", fields: dict | None = None):
        super().__init__(message, fields=fields or {})
        self.fields = fields or {}


class ReferenceNotFound(SchedulingError):
    code = "reference_not_found"
    status = 400


class NotFoundOnMutation(SchedulingError):
    """The targeted row does not exist, so nothing changed."""

    code = "not_found"
    status = 404


class LastCategoryError(SchedulingError):
    code = "last_category"
    status = 409


class StoreUnavailable(SchedulingError):
    code = "store_unavailable"
    status = 500
