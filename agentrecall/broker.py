"""HTTP broker exposing the context retrieval engine to the orchestrator."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from agentrecall import __version__
from agentrecall.config import RetrieverConfig
from agentrecall.retriever import RetrievalEngine, create_engine
from agentrecall.schemas import (
    CapabilityDescription,
    CleanupRequest,
    CleanupResponse,
    CorrelationContext,
    DelegationResult,
    EngineStats,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    RetrieveRequest,
    RetrieveResponse,
    WorkflowSummary,
)

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

router = APIRouter()


def get_engine(request: Request) -> RetrievalEngine:
    """Engine owned by the running app."""
    return request.app.state.engine


def _ingest_response(entry_id: str | None) -> IngestResponse:
    return IngestResponse(entry_id=entry_id, accepted=entry_id is not None)


# --- Ingestion ---


@router.post("/context/delegation", response_model=IngestResponse)
async def add_delegation(
    result: DelegationResult,
    engine: RetrievalEngine = Depends(get_engine),
) -> IngestResponse:
    """Record a delegation outcome."""
    logger.info(f"Recording delegation: agent={result.agent_type}, success={result.success}")
    return _ingest_response(engine.add_delegation_context(result))


@router.post("/context/workflow", response_model=IngestResponse)
async def add_workflow(
    workflow: WorkflowSummary,
    engine: RetrievalEngine = Depends(get_engine),
) -> IngestResponse:
    """Record a workflow summary."""
    logger.info(f"Recording workflow: id={workflow.workflow_id}, status={workflow.status.value}")
    return _ingest_response(engine.add_workflow_context(workflow))


@router.post("/context/capability", response_model=IngestResponse)
async def add_capability(
    capability: CapabilityDescription,
    engine: RetrievalEngine = Depends(get_engine),
) -> IngestResponse:
    """Record a worker agent capability."""
    return _ingest_response(engine.add_capability_context(capability))


# --- Retrieval ---


@router.post("/retrieve", response_model=RetrieveResponse)
async def retrieve(
    request: RetrieveRequest,
    engine: RetrievalEngine = Depends(get_engine),
) -> RetrieveResponse:
    """Return formatted prior context for a query.

    Args:
        request: RetrieveRequest with the query text

    Returns:
        RetrieveResponse with the context string and, on request, correlation details
    """
    correlation = CorrelationContext() if request.include_correlation else None
    context = await engine.retrieve(request.query, correlation)
    return RetrieveResponse(context=context, correlation=correlation)


# --- Housekeeping ---


@router.get("/stats", response_model=EngineStats)
async def stats(engine: RetrievalEngine = Depends(get_engine)) -> EngineStats:
    """Store and cache statistics."""
    return engine.get_stats()


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup(
    request: CleanupRequest,
    engine: RetrievalEngine = Depends(get_engine),
) -> CleanupResponse:
    """Purge entries older than max_age_ms."""
    return CleanupResponse(removed=engine.cleanup(request.max_age_ms))


@router.get("/health", response_model=HealthResponse)
async def health(engine: RetrievalEngine = Depends(get_engine)) -> HealthResponse:
    """Check broker health."""
    return HealthResponse(
        broker="healthy",
        entries=len(engine.store),
        cached_queries=len(engine.cache),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            detail=str(exc),
            error_code="INTERNAL_ERROR",
        ).model_dump(),
    )


def create_app(
    engine: RetrievalEngine | None = None,
    config: RetrieverConfig | None = None,
) -> FastAPI:
    """Build the broker app around one engine.

    Args:
        engine: Engine to serve (a seeded one is created when omitted)
        config: Settings used when no engine is given (read from the environment by default)

    Returns:
        FastAPI application
    """
    if engine is None:
        config = config or RetrieverConfig.from_env()
        engine = create_engine(config)

    logging.getLogger("agentrecall").setLevel(engine.config.log_level)

    app = FastAPI(
        title="AgentRecall Broker",
        description="Short-term context recall for a supervisor agent",
        version=__version__,
    )
    app.state.engine = engine
    app.include_router(router)
    app.add_exception_handler(Exception, generic_exception_handler)
    return app
