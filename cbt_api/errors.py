"""
Failure kinds for the question generation pipeline.

Every kind carries the HTTP status it maps to and the message the caller
sees. Detailed causes stay in the exception chain and the server logs.
"""

GENERIC_FAILURE_MESSAGE = "Failed to generate questions."


class QuestionGenerationError(Exception):
    status_code = 500
    public_message = GENERIC_FAILURE_MESSAGE


class InvalidRequest(QuestionGenerationError):
    """Caller input is missing or malformed. Never reaches the provider."""

    status_code = 400

    def __init__(self, message: str = "Missing exam, subject, or count in request."):
        super().__init__(message)
        self.public_message = message


class UpstreamFailure(QuestionGenerationError):
    """Transport, auth, rate-limit, timeout or empty completion from the provider."""


class MalformedUpstreamResponse(QuestionGenerationError):
    """Completion text is not a JSON document."""


class UnexpectedSchema(QuestionGenerationError):
    """Completion is JSON but not a usable question set."""
