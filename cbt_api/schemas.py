from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_QUESTIONS = 50
OPTION_COUNT = 4


# -----------------------------
# REQUEST
# -----------------------------

class GenerationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    exam: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    count: int = Field(..., gt=0, le=MAX_QUESTIONS)

    @field_validator("count", mode="before")
    @classmethod
    def reject_boolean_count(cls, value):
        # JSON true/false would otherwise be read as 1/0
        if isinstance(value, bool):
            raise ValueError("count must be an integer")
        return value


# -----------------------------
# RESPONSE
# -----------------------------

class QuestionRecord(BaseModel):
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=OPTION_COUNT, max_length=OPTION_COUNT)
    answer: int = Field(..., ge=0, le=OPTION_COUNT - 1)
    explanation: str = ""


class QuestionSet(BaseModel):
    questions: List[QuestionRecord] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str


class ErrorResponse(BaseModel):
    message: str
