import logging
from functools import lru_cache

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cbt_api.config import settings
from cbt_api.errors import GENERIC_FAILURE_MESSAGE, InvalidRequest, QuestionGenerationError
from cbt_api.llm_providers import LLMProvider, get_llm_provider
from cbt_api.quiz import generate_questions
from cbt_api.schemas import ErrorResponse, GenerationRequest, HealthResponse, QuestionSet

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="CBT Question Generator", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# DEPENDENCIES
# -----------------------------

@lru_cache
def get_provider() -> LLMProvider:
    try:
        return get_llm_provider(settings)
    except ValueError as e:
        logger.error(f"[LLM ERROR] Provider not configured: {e}")
        raise QuestionGenerationError(str(e)) from e


# -----------------------------
# ERROR HANDLERS
# -----------------------------

def _validation_message(errors) -> str:
    if any(err.get("type") in ("missing", "string_too_short", "json_invalid") for err in errors):
        return InvalidRequest().public_message

    details = []
    for err in errors:
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{field or 'body'}: {err.get('msg')}")
    return "Invalid request. " + "; ".join(details)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await handle_generation_error(request, InvalidRequest(_validation_message(exc.errors())))


@app.exception_handler(QuestionGenerationError)
async def handle_generation_error(request: Request, exc: QuestionGenerationError):
    if exc.status_code >= 500:
        cause = exc.__cause__
        logger.error(
            f"[API] {request.url.path} failed with {type(exc).__name__}: {exc}"
            + (f" (cause: {type(cause).__name__}: {cause})" if cause else "")
        )
    else:
        logger.info(f"[API] {request.url.path} rejected: {exc.public_message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.public_message})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"[API] Unexpected error on {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": GENERIC_FAILURE_MESSAGE})


# -----------------------------
# ROUTES
# -----------------------------

@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", message="Server is alive and well!")


@app.post(
    "/api/generate-questions",
    response_model=QuestionSet,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_questions_api(
    req: GenerationRequest,
    provider: LLMProvider = Depends(get_provider),
):
    return await generate_questions(req, provider)


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
