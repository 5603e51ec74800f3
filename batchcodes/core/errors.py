"""Typed failures raised by the registry, the allocator and the code parser.

Each error carries the name reported to callers and the HTTP status the API
maps it to. Everything except ``AllocationFailed`` is permanent for the same
input; ``AllocationFailed`` is safe to retry as a whole operation.
"""


class BatchCodeError(Exception):
    error = "batch_code_error"
    status_code = 400

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.context:
            body["context"] = {k: str(v) for k, v in self.context.items()}
        return body


class DimensionNotFound(BatchCodeError):
    error = "dimension_not_found"
    status_code = 404


class DimensionConflict(BatchCodeError):
    error = "dimension_conflict"
    status_code = 409


class InvalidCode(BatchCodeError):
    error = "invalid_code"
    status_code = 422


class SequenceExhausted(BatchCodeError):
    error = "sequence_exhausted"
    status_code = 409


class AllocationFailed(BatchCodeError):
    error = "allocation_failed"
    status_code = 503


class MalformedCode(BatchCodeError):
    error = "malformed_code"
    status_code = 422


class CounterConflict(Exception):
    """A counter row for the key already exists (lost a creation race)."""


class StoreContention(Exception):
    """The store could not apply a write right now (lock timeout, serialization failure)."""
