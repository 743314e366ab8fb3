"""
learnpath API - Main FastAPI application.

Entry point for the learning platform backend. Every route proxies one
call (or, for resources, one call per gap) to the completion service.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from learnpath import __version__
from learnpath.config import get_settings
from learnpath.core.models import ChatMessage, Question, Task
from learnpath.engine import InvalidModelOutputError, Tutor, TutorError
from learnpath.middleware.auth import APITokenMiddleware
from learnpath.providers import GroqAdapter, ProviderAdapter, ProviderError

logger = logging.getLogger(__name__)


# Global instances
provider: ProviderAdapter | None = None
tutor: Tutor | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - setup and teardown."""
    global provider, tutor

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.groq_api_key:
        logger.warning("GROQ_API_KEY is not set; completion requests will fail")

    provider = GroqAdapter(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        timeout=settings.request_timeout,
    )
    tutor = Tutor(provider, model=settings.model_name)

    yield

    # Cleanup
    await provider.close()
    provider = None
    tutor = None


app = FastAPI(
    title="learnpath API",
    description="Roadmaps, quizzes and learning resources generated by an LLM",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(APITokenMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_tutor() -> Tutor:
    """Dependency returning the application's tutor."""
    if not tutor:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return tutor


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies as 400 with the front end's error shape."""
    problems = [
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')} {err['msg']}".strip()
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid input: {'; '.join(problems)}"},
    )


@app.exception_handler(InvalidModelOutputError)
async def invalid_output_handler(request: Request, exc: InvalidModelOutputError) -> JSONResponse:
    logger.error("Invalid model output on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc), "raw": exc.raw})


@app.exception_handler(TutorError)
async def tutor_error_handler(request: Request, exc: TutorError) -> JSONResponse:
    logger.error("Error in %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    logger.error("Provider %s failed on %s: %s", exc.provider, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# =============================================================================
# Request/Response Models
# =============================================================================


class ChatRequest(BaseModel):
    """Request body for /api/chat."""
    conversation: list[ChatMessage]


class RoadmapRequest(BaseModel):
    """Request body for /api/roadmap (the user's chat messages)."""
    conversation: list[str]


class QuizRequest(BaseModel):
    """Request body for /api/test."""
    topic: str = Field(min_length=1)
    concepts: list[str]


class AnalyzeRequest(BaseModel):
    """Request body for /api/analyze."""
    topic: str = Field(min_length=1)
    questions: list[Question]
    answers: dict[str, str]


class MeasureRequest(BaseModel):
    """Request body for /api/measure."""
    question: str = Field(min_length=1)
    answer: str
    context: str | None = None


class ResourcesRequest(BaseModel):
    """Request body for /api/resources."""
    gaps: list[str]


class MasteryRequest(BaseModel):
    """Request body for /api/mastery."""
    topic: str | None = None
    tasks: list[Task]


# =============================================================================
# Health & Status Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """Basic health check."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/status")
async def status(tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """Detailed status including upstream provider health."""
    health_result = await tutor.provider.health_check()
    return {
        "version": __version__,
        "model": tutor.model,
        "provider": {
            "name": tutor.provider.name,
            "status": health_result.status.value,
            "latency_ms": health_result.latency_ms,
            "error": health_result.error,
        },
    }


# =============================================================================
# Learning Endpoints
# =============================================================================


@app.post("/api/chat")
async def chat(request: ChatRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, str]:
    """Ask the next information-gathering question."""
    reply = await tutor.chat(request.conversation)
    return {"reply": reply}


@app.post("/api/roadmap")
async def roadmap(request: RoadmapRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """Turn the conversation into milestones and topics."""
    result = await tutor.generate_roadmap(request.conversation)
    return result.model_dump()


@app.post("/api/test")
async def quiz(request: QuizRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """Generate quiz questions for a topic."""
    questions = await tutor.generate_test(request.topic, request.concepts)
    return {"questions": [q.model_dump() for q in questions]}


@app.post("/api/analyze")
async def analyze(request: AnalyzeRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """List knowledge gaps from quiz answers."""
    gaps = await tutor.analyze_gaps(request.topic, request.questions, request.answers)
    return {"gaps": gaps}


@app.post("/api/measure")
async def measure(request: MeasureRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """
    Grade a free-text answer.

    Always returns an assessment; unusable model output yields the
    fallback assessment rather than an error.
    """
    assessment = await tutor.measure_understanding(
        request.question, request.answer, request.context
    )
    return assessment.model_dump(by_alias=True)


@app.post("/api/resources")
async def resources(request: ResourcesRequest, tutor: Tutor = Depends(get_tutor)) -> dict[str, Any]:
    """Write learning resources for knowledge gaps."""
    tasks = await tutor.generate_resources(request.gaps)
    return {"resources": [t.model_dump() for t in tasks]}


@app.post("/api/mastery")
async def mastery(request: MasteryRequest) -> dict[str, Any]:
    """Check whether every resource task for a topic is completed."""
    return {"topic": request.topic, "mastered": Tutor.check_mastery(request.tasks)}
