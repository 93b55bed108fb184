"""Typed errors raised by the approval workflow.

Each error carries a machine-readable ``code`` and the HTTP status the
JSON views answer with. Django's own ``ValidationError`` is still used for
model-level invariants; these classes are for workflow requests.
"""


class TransitionError(Exception):
    """Base class for every refused workflow request."""

    code = "transition_error"
    http_status = 400
    default_message = "The request could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotFound(TransitionError):
    code = "not_found"
    http_status = 404
    default_message = "Asset record not found."


class Unauthorized(TransitionError):
    code = "unauthorized"
    http_status = 403
    default_message = "You are not allowed to perform this action."


class InvalidTransition(TransitionError):
    code = "invalid_transition"
    http_status = 409
    default_message = (
        "This action is not allowed in the record's current state."
    )


class ValidationError(TransitionError):
    """Payload failed validation; ``fields`` maps field name to message."""

    code = "validation_error"
    http_status = 400
    default_message = "Please correct the errors below."

    def __init__(self, message=None, fields=None):
        self.fields = dict(fields or {})
        if message is None and len(self.fields) == 1:
            message = next(iter(self.fields.values()))
        super().__init__(message)

    def as_dict(self) -> dict:
        data = super().as_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


class ConflictError(TransitionError):
    code = "conflict"
    http_status = 409
    default_message = (
        "This record was already acted upon; please refresh and retry."
    )
