"""Errors raised by the test assembly and assignment workflow.

Validation-type errors subclass DRF's ``ValidationError`` so views can let
them propagate and the client receives field-level messages.
"""
from rest_framework import exceptions, status


class NoMatchingQuestions(exceptions.ValidationError):
    def __init__(self, detail=None):
        super().__init__(
            {"bank": [detail or "No questions match the selected bank and filters."]}
        )


class InvalidTimeRange(exceptions.ValidationError):
    def __init__(self, detail=None):
        super().__init__(
            {"end_at": [detail or "End time must not be earlier than start time."]}
        )


class InvalidAssignmentTarget(exceptions.ValidationError):
    def __init__(self, field: str, message: str):
        super().__init__({field: [message]})


class TestInUse(exceptions.ValidationError):
    def __init__(self):
        super().__init__(
            {"test": ["The test already has attempts and cannot be deleted."]}
        )


class ConcurrencyConflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The test was modified by someone else. Reload it and try again."
    default_code = "conflict"


class PersistenceFailure(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The test could not be saved. Please try again later."
    default_code = "persistence_failure"
