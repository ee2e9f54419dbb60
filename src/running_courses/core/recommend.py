"""Course ranking via a generative model.

One attempt is: build prompt -> call model (raced against a timeout) ->
extract JSON -> validate. Attempts are retried a fixed number of times with
a fixed backoff; the last error is raised once they run out.

Per-request state machine (logged at DEBUG):

    IDLE -> PROMPTING -> AWAITING_MODEL -> SUCCESS -> DONE
                              |-> TIMED_OUT    -> PROMPTING (retry) | FAILED
                              |-> PARSE_FAILED -> PROMPTING (retry) | FAILED
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Iterable, Optional

from pydantic import ValidationError

from ..errors import (
    LlmTimeout,
    MalformedModelOutput,
    ModelServiceError,
    RecommendationError,
    UpstreamServiceError,
)
from ..models import MAX_RECOMMENDATIONS, EnrichedCourse, RecommendationSet
from .deadline import run_with_deadline
from .json_extract import extract_json_object
from .llm import TextModel
from .profile import analyze_profile, direction_reversals, profile_changes

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA = """{
  "recommendations": [
    {
      "courseId": <number>,
      "rank": <1 | 2 | 3>,
      "summary": "<one sentence describing the course>",
      "reason": "<why this course is easy to run, citing the elevation pattern>",
      "elevationAnalysis": {
        "averageChange": <meters>,
        "totalAscent": <meters>,
        "totalDescent": <meters>
      },
      "scores": {
        "elevation": <0-10>,
        "overall": <0-10>
      }
    }
  ]
}"""


class EngineState(str, Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    AWAITING_MODEL = "awaiting_model"
    SUCCESS = "success"
    TIMED_OUT = "timed_out"
    PARSE_FAILED = "parse_failed"
    DONE = "done"
    FAILED = "failed"


def _course_payload(course: EnrichedCourse) -> dict:
    changes = profile_changes(course.midpoints)
    stats = analyze_profile(course.midpoints)
    return {
        "id": course.id,
        "angle": course.angle,
        "start": course.start.model_dump(exclude_none=True),
        "end": course.end.model_dump(exclude_none=True),
        "midpoints": [mp.model_dump() for mp in course.midpoints],
        "profile": {
            "changes": [round(float(c), 2) for c in changes],
            "averageChange": stats.average_change,
            "totalAscent": stats.total_ascent,
            "totalDescent": stats.total_descent,
            "reversals": direction_reversals(changes),
        },
    }


def build_ranking_prompt(courses: list[EnrichedCourse]) -> str:
    """Ranking prompt covering every course's geometry and elevation samples."""
    data = json.dumps([_course_payload(c) for c in courses], ensure_ascii=False, indent=2)
    return f"""You are an expert in recommending running courses.
Below are {len(courses)} candidate out-and-back running courses that share one start point.
Each course has an id, a compass angle, start and end coordinates (with addresses when known),
and three midpoints sampled at 25%, 50% and 75% of the way with their elevations in meters.
The "profile" block holds reference figures computed from the midpoint elevations.

Analyze the elevation change between consecutive midpoints, not only the net difference
between start and end. Prefer courses with:
- a low average elevation change
- low total ascent and total descent
- few reversals between climbing and descending

Pick the {MAX_RECOMMENDATIONS} most runnable courses and rank them 1 to {MAX_RECOMMENDATIONS}.
Respond with ONLY a single JSON object in exactly this format. Do not use markdown code fences
and do not add any text before or after the JSON:

{RESPONSE_SCHEMA}

Courses:
{data}
"""


def parse_recommendations(text: str, course_ids: Optional[Iterable[int]] = None) -> RecommendationSet:
    """Extract, decode, cap at three entries and validate a model response."""
    raw = extract_json_object(text)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedModelOutput(f"Model output is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("recommendations"), list):
        raise MalformedModelOutput("Model output has no 'recommendations' list")
    payload["recommendations"] = payload["recommendations"][:MAX_RECOMMENDATIONS]

    try:
        result = RecommendationSet.model_validate(payload)
    except ValidationError as exc:
        raise MalformedModelOutput(f"Model output does not match the schema: {exc}") from exc

    if course_ids is not None:
        known = set(course_ids)
        unknown = [r.course_id for r in result.recommendations if r.course_id not in known]
        if unknown:
            raise MalformedModelOutput(f"Model recommended unknown course ids {unknown}")
    ids = [r.course_id for r in result.recommendations]
    if len(set(ids)) != len(ids):
        raise MalformedModelOutput(f"Model recommended the same course more than once: {ids}")
    if not result.recommendations:
        raise MalformedModelOutput("Model returned no recommendations")
    return result


class RecommendationEngine:
    def __init__(
        self,
        model: TextModel,
        timeout_s: float = 8.5,
        max_attempts: int = 2,
        backoff_s: float = 0.5,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.model = model
        self.timeout_s = timeout_s
        self.max_attempts = max_attempts
        self.backoff_s = backoff_s

    async def _attempt(self, courses: list[EnrichedCourse], attempt: int) -> RecommendationSet:
        self._transition(EngineState.PROMPTING, attempt)
        prompt = build_ranking_prompt(courses)

        self._transition(EngineState.AWAITING_MODEL, attempt)
        try:
            text = await run_with_deadline(self.model.complete(prompt), self.timeout_s, LlmTimeout)
        except UpstreamServiceError as exc:
            raise ModelServiceError(str(exc)) from exc
        return parse_recommendations(text, course_ids=[c.id for c in courses])

    async def recommend(self, courses: list[EnrichedCourse]) -> RecommendationSet:
        """Rank courses, retrying timeouts and unusable output."""
        self._transition(EngineState.IDLE, 0)
        last_error: Optional[RecommendationError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._attempt(courses, attempt)
            except LlmTimeout as exc:
                self._transition(EngineState.TIMED_OUT, attempt)
                last_error = exc
            except RecommendationError as exc:
                self._transition(EngineState.PARSE_FAILED, attempt)
                last_error = exc
            else:
                self._transition(EngineState.SUCCESS, attempt)
                self._transition(EngineState.DONE, attempt)
                return result

            logger.warning(
                "Recommendation attempt %d/%d failed (%s): %s",
                attempt, self.max_attempts, last_error.kind, last_error,
            )
            if attempt == self.max_attempts:
                self._transition(EngineState.FAILED, attempt)
                raise last_error
            await asyncio.sleep(self.backoff_s)

    @staticmethod
    def _transition(state: EngineState, attempt: int) -> None:
        logger.debug("Recommendation engine -> %s (attempt %d)", state.value, attempt)
