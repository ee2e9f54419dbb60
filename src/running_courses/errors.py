"""Error taxonomy for the course pipeline.

Each error carries a ``kind`` (stable name reported to clients) and the
HTTP-equivalent ``status_code`` the front door should answer with:

- ValidationError (400): missing or invalid request inputs
- BatchLimitExceeded (400): elevation batch over the service ceiling
- UpstreamServiceError (500): elevation or geocoding service failure
- LlmTimeout, MalformedModelOutput, ModelServiceError (503): model stage
  failures after retries
- PipelineTimeout (408): outer request deadline exceeded
- InternalError (500): anything else
"""

from typing import Optional


class CourseServiceError(Exception):
    """Base class for all errors surfaced by the course pipeline."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(CourseServiceError):
    kind = "ValidationError"
    status_code = 400


class BatchLimitExceeded(CourseServiceError):
    kind = "BatchLimitExceeded"
    status_code = 400

    def __init__(self, requested: int, limit: int):
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Elevation batch of {requested} coordinates exceeds the limit of {limit}"
        )


class UpstreamServiceError(CourseServiceError):
    kind = "UpstreamServiceError"
    status_code = 500

    def __init__(self, service: str, message: str, status: Optional[int] = None):
        self.service = service
        self.status = status
        super().__init__(f"{service}: {message}")


class RecommendationError(CourseServiceError):
    """Model stage failure; reported to clients as 'AI service unavailable'."""

    kind = "RecommendationError"
    status_code = 503


class LlmTimeout(RecommendationError):
    kind = "LlmTimeout"

    def __init__(self, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(f"Model did not respond within {timeout_s:.1f}s")


class MalformedModelOutput(RecommendationError):
    kind = "MalformedModelOutput"


class ModelServiceError(RecommendationError):
    """The model endpoint itself failed (HTTP error, no candidates)."""

    kind = "ModelServiceError"


class PipelineTimeout(CourseServiceError):
    kind = "PipelineTimeout"
    status_code = 408

    def __init__(self, timeout_s: float):
        self.timeout_s = timeout_s
        super().__init__(f"Course generation did not finish within {timeout_s:.1f}s")


class InternalError(CourseServiceError):
    kind = "InternalError"
    status_code = 500
