import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from cbt_api.errors import MalformedUpstreamResponse, UnexpectedSchema
from cbt_api.llm_providers import LLMProvider
from cbt_api.prompts import build_prompt
from cbt_api.schemas import GenerationRequest, QuestionRecord, QuestionSet

logger = logging.getLogger(__name__)

OPTION_LABELS = "ABCD"
RAW_PREVIEW_CHARS = 2000

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)
_INDEX_RE = re.compile(r"^[+-]?\d+$")
# "B", "b", "B)", "(B)", "B.", "Option B"
_LETTER_RE = re.compile(r"^(?:option\s*)?\(?([a-d])\)?[.):]?$", re.IGNORECASE)


def _strip_code_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def _preview(text: str) -> str:
    if len(text) <= RAW_PREVIEW_CHARS:
        return text
    return f"{text[:RAW_PREVIEW_CHARS]}... [{len(text) - RAW_PREVIEW_CHARS} more chars]"


def _normalize_options(options):
    """Accept {"A": ..., "D": ...} as well as a plain list"""
    if isinstance(options, dict):
        keyed = {str(k).strip().upper(): v for k, v in options.items()}
        if sorted(keyed) != list(OPTION_LABELS):
            raise UnexpectedSchema(f"options keys must be A-D, got {sorted(options)}")
        return [keyed[label] for label in OPTION_LABELS]
    return options


def coerce_answer(answer, options=None) -> int:
    """
    Convert an upstream answer to a zero-based option index.

    Integers pass through. A string equal to one of the option texts maps to
    its position, other numeric strings are read as indexes and letters A-D
    map to 0-3. Range checking is left to QuestionRecord.
    """
    if isinstance(answer, bool):
        raise UnexpectedSchema(f"answer must not be a boolean: {answer!r}")

    if isinstance(answer, int):
        return answer

    if isinstance(answer, float) and answer.is_integer():
        return int(answer)

    if isinstance(answer, str):
        value = answer.strip()

        # Exact option text wins, so "2" among ["1", "2", "3", "4"] is the second option
        if isinstance(options, list):
            lowered = [o.strip().lower() if isinstance(o, str) else o for o in options]
            if value.lower() in lowered:
                return lowered.index(value.lower())

        if _INDEX_RE.match(value):
            try:
                return int(value)
            except ValueError as e:
                raise UnexpectedSchema(f"answer is not a usable index: {value[:20]}...") from e

        match = _LETTER_RE.match(value)
        if match:
            return OPTION_LABELS.index(match.group(1).upper())

    raise UnexpectedSchema(f"answer cannot be converted to an option index: {answer!r}")


def _normalize_record(position: int, item) -> QuestionRecord:
    if not isinstance(item, dict):
        raise UnexpectedSchema(f"questions[{position}] is not an object")

    if item.get("answer") is None:
        raise UnexpectedSchema(f"questions[{position}] has no answer")

    explanation = item.get("explanation")

    try:
        options = _normalize_options(item.get("options"))
        return QuestionRecord(
            question=item.get("question"),
            options=options,
            answer=coerce_answer(item["answer"], options),
            explanation="" if explanation is None else explanation,
        )
    except UnexpectedSchema as e:
        raise UnexpectedSchema(f"questions[{position}]: {e}") from e
    except ValidationError as e:
        raise UnexpectedSchema(f"questions[{position}] invalid: {e}") from e


def parse_questions(raw: str, expected_count: Optional[int] = None) -> QuestionSet:
    """
    Parse and normalize the raw completion text.

    Fails the whole batch when any record cannot be normalized.
    """
    try:
        data = json.loads(_strip_code_fence(raw))
    except ValueError as e:
        logger.error(f"[QUIZ ERROR] Upstream reply is not valid JSON: {_preview(raw)}")
        raise MalformedUpstreamResponse(f"Completion is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise UnexpectedSchema(f"Expected a JSON object, got {type(data).__name__}")

    questions = data.get("questions")
    if not isinstance(questions, list):
        raise UnexpectedSchema("Completion has no 'questions' list")

    records = [_normalize_record(i, item) for i, item in enumerate(questions)]

    if expected_count is not None and len(records) != expected_count:
        logger.warning(f"[QUIZ] Requested {expected_count} questions, provider returned {len(records)}")

    return QuestionSet(questions=records)


async def generate_questions(req: GenerationRequest, provider: LLMProvider) -> QuestionSet:
    logger.info(f"[QUIZ] Prompting exam={req.exam!r} subject={req.subject!r} count={req.count}")
    prompt = build_prompt(req.exam, req.subject, req.count)

    logger.info("[QUIZ] Awaiting generation")
    raw = await provider.generate(prompt)

    logger.info(f"[QUIZ] Normalizing response ({len(raw)} chars)")
    question_set = parse_questions(raw, expected_count=req.count)

    logger.info(f"[QUIZ] Succeeded with {len(question_set.questions)} questions")
    return question_set
