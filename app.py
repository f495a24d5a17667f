"""
ReasonKit FastAPI Application

A REST API server for reasoning sessions.
Provides endpoints for session artifacts, knowledge graphs and
sandboxed notebooks.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from reasonkit import __version__
from reasonkit.config import Config
from reasonkit.core.notebook.presets import NOTEBOOK_PRESETS
from reasonkit.models import (
    ArtifactKind,
    CellType,
    EdgeInput,
    GraphMetrics,
    NodeInput,
    SessionExport,
    SessionStatistics,
)
from reasonkit.services import ServiceContainer, Session
from reasonkit.utils.exceptions import (
    CapacityExceededError,
    ExecutionTimeoutError,
    NotFoundError,
    ReasonKitError,
    SessionClosedError,
    ValidationError,
)
from reasonkit.utils.logger import get_logger, setup_logging

# Global service container
container: ServiceContainer | None = None
logger = get_logger(__name__)


# Pydantic models for API
class CreateSessionRequest(BaseModel):
    """Request model for creating a session."""

    session_id: str | None = Field(default=None, description="Reuse this id if given")


class CreateSessionResponse(BaseModel):
    session_id: str
    created_at: str


class AddArtifactResponse(BaseModel):
    """Response model for adding an artifact."""

    session_id: str
    kind: str
    accepted: bool
    remaining: int | None = None


class ImportResponse(BaseModel):
    session_id: str
    imported: int


class CreateNotebookRequest(BaseModel):
    """Request model for creating a notebook."""

    session_id: str
    preset: str | None = Field(default=None, description="Preset to populate the notebook with")


class AddCellRequest(BaseModel):
    """Request model for adding a cell."""

    cell_type: CellType
    source: str
    language: str | None = None
    index: int | None = Field(default=None, ge=0)


class UpdateCellRequest(BaseModel):
    source: str | None = None
    metadata: dict[str, Any] | None = None


class RunCellRequest(BaseModel):
    timeout: float | None = Field(default=None, gt=0.0, description="Deadline in seconds")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    services_initialized: bool
    active_sessions: int
    notebooks: int
    persistence_enabled: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global container

    # Load configuration from environment or use defaults
    config = Config.from_env()

    # Initialize logging with config
    setup_logging(config.logging, debug=config.debug)

    logger.info("Starting ReasonKit server")
    logger.info(
        f"Configuration: max_thoughts={config.session.max_thoughts_per_session}, "
        f"graph_mode={config.graph.default_mode.value}, "
        f"persistence={'on' if config.persistence.enabled else 'off'}"
    )

    container = ServiceContainer(config)
    await container.start()
    logger.info("ReasonKit services initialized")

    yield

    # Cleanup
    logger.info("Shutting down ReasonKit server")
    await container.shutdown()
    container = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="ReasonKit API",
    description="Session-scoped reasoning state, knowledge graphs and sandboxed notebooks",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_container() -> ServiceContainer:
    if container is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return container


def _status_for(error: ReasonKitError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, CapacityExceededError):
        return 409
    if isinstance(error, ExecutionTimeoutError):
        return 408
    if isinstance(error, SessionClosedError):
        return 410
    return 500


@app.exception_handler(ReasonKitError)
async def reasonkit_error_handler(request: Request, exc: ReasonKitError):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(f"Error handling {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__, "context": exc.context},
    )


def _require_session(services: ServiceContainer, session_id: str) -> Session:
    session = services.sessions.get(session_id)
    if session is None:
        raise NotFoundError(f"Session {session_id} not found", {"session_id": session_id})
    return session


def _parse_kind(kind: str) -> ArtifactKind:
    try:
        return ArtifactKind(kind)
    except ValueError as e:
        raise ValidationError(
            f"Unknown artifact kind: {kind}", {"available": [k.value for k in ArtifactKind]}
        ) from e


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if container else "initializing",
        services_initialized=container is not None,
        active_sessions=len(container.sessions) if container else 0,
        notebooks=len(container.notebooks.list_notebooks()) if container else 0,
        persistence_enabled=container.config.persistence.enabled if container else False,
    )


# Session endpoints
@app.post("/sessions", response_model=CreateSessionResponse)
async def create_session(
    request: CreateSessionRequest, services: ServiceContainer = Depends(get_container)
):
    """Create a session, or return the live one with the requested id."""
    session = services.sessions.get_or_create(request.session_id)
    return CreateSessionResponse(
        session_id=session.session_id, created_at=session.created_at.isoformat()
    )


@app.get("/sessions", response_model=list[str])
async def list_sessions(services: ServiceContainer = Depends(get_container)):
    return services.sessions.list_sessions()


@app.get("/sessions/{session_id}/stats", response_model=SessionStatistics)
async def get_session_stats(session_id: str, services: ServiceContainer = Depends(get_container)):
    return _require_session(services, session_id).get_stats()


@app.post("/sessions/{session_id}/artifacts/{kind}", response_model=AddArtifactResponse)
async def add_artifact(
    session_id: str,
    kind: str,
    artifact: dict[str, Any],
    services: ServiceContainer = Depends(get_container),
):
    """
    Add a reasoning artifact to a session.

    The session is created on first use. A full store is reported with
    accepted=false rather than an error.
    """
    artifact_kind = _parse_kind(kind)
    session = services.sessions.get_or_create(session_id)
    accepted = session.add(artifact_kind, artifact)
    return AddArtifactResponse(
        session_id=session_id,
        kind=artifact_kind.value,
        accepted=accepted,
        remaining=session.get_remaining(artifact_kind),
    )


@app.get("/sessions/{session_id}/artifacts/{kind}")
async def get_artifacts(
    session_id: str, kind: str, services: ServiceContainer = Depends(get_container)
):
    session = _require_session(services, session_id)
    return [item.model_dump(mode="json") for item in session.get_all(_parse_kind(kind))]


@app.get("/sessions/{session_id}/export", response_model=list[SessionExport])
async def export_session(
    session_id: str,
    store_type: str | None = Query(default=None, description="Kind or export tag"),
    services: ServiceContainer = Depends(get_container),
):
    return _require_session(services, session_id).export(store_type)


@app.post("/sessions/{session_id}/import", response_model=ImportResponse)
async def import_session(
    session_id: str,
    records: list[dict[str, Any]],
    services: ServiceContainer = Depends(get_container),
):
    """Replay exported records into a session, creating it if needed."""
    session = services.sessions.get_or_create(session_id)
    return ImportResponse(session_id=session_id, imported=session.import_data(records))


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str, services: ServiceContainer = Depends(get_container)):
    if not services.sessions.remove(session_id):
        raise NotFoundError(f"Session {session_id} not found", {"session_id": session_id})
    return {"id": session_id, "deleted": True}


# Knowledge graph endpoints
@app.post("/sessions/{session_id}/graphs/{graph_id}/nodes")
async def create_graph_node(
    session_id: str,
    graph_id: str,
    request: NodeInput,
    services: ServiceContainer = Depends(get_container),
):
    graph = services.sessions.get_or_create(session_id).get_graph(graph_id)
    node_id = graph.create_node(request)
    return {"node_id": node_id, "node_count": graph.node_count()}


@app.post("/sessions/{session_id}/graphs/{graph_id}/edges")
async def add_graph_edge(
    session_id: str,
    graph_id: str,
    request: EdgeInput,
    services: ServiceContainer = Depends(get_container),
):
    graph = _require_session(services, session_id).get_graph(graph_id)
    edge_id = graph.add_edge(request)
    return {"edge_id": edge_id, "edge_count": graph.edge_count()}


@app.get("/sessions/{session_id}/graphs/{graph_id}/metrics", response_model=GraphMetrics)
async def get_graph_metrics(
    session_id: str, graph_id: str, services: ServiceContainer = Depends(get_container)
):
    return _require_session(services, session_id).get_graph(graph_id).get_metrics()


@app.get("/sessions/{session_id}/graphs/{graph_id}")
async def export_graph(
    session_id: str, graph_id: str, services: ServiceContainer = Depends(get_container)
):
    """Serialized graph, as accepted by PUT on the same path."""
    text = _require_session(services, session_id).serialize_graph(graph_id)
    return PlainTextResponse(text, media_type="application/json")


@app.put("/sessions/{session_id}/graphs/{graph_id}")
async def import_graph(
    session_id: str,
    graph_id: str,
    request: Request,
    services: ServiceContainer = Depends(get_container),
):
    text = (await request.body()).decode("utf-8")
    graph = services.sessions.get_or_create(session_id).deserialize_graph(text, graph_id)
    return {"graph_id": graph_id, "nodes": graph.node_count(), "edges": graph.edge_count()}


# Notebook endpoints
@app.get("/notebooks/presets")
async def list_notebook_presets():
    return [
        {"name": name, "description": preset.description, "cells": len(preset.cells)}
        for name, preset in NOTEBOOK_PRESETS.items()
    ]


@app.post("/notebooks")
async def create_notebook(
    request: CreateNotebookRequest, services: ServiceContainer = Depends(get_container)
):
    """Create the session's notebook, optionally from a preset."""
    if request.preset:
        notebook = services.notebooks.create_from_preset(request.session_id, request.preset)
    else:
        notebook = services.notebooks.create_notebook(request.session_id)
    return notebook.model_dump(mode="json")


@app.get("/notebooks/{notebook_id}")
async def get_notebook(notebook_id: str, services: ServiceContainer = Depends(get_container)):
    return services.notebooks.export_to_json(notebook_id)


@app.delete("/notebooks/{notebook_id}")
async def delete_notebook(notebook_id: str, services: ServiceContainer = Depends(get_container)):
    if not services.notebooks.delete_notebook(notebook_id):
        raise NotFoundError(f"Notebook {notebook_id} not found", {"notebook_id": notebook_id})
    return {"id": notebook_id, "deleted": True}


@app.post("/notebooks/{notebook_id}/cells")
async def add_cell(
    notebook_id: str, request: AddCellRequest, services: ServiceContainer = Depends(get_container)
):
    cell = services.notebooks.add_cell(
        notebook_id,
        request.cell_type,
        request.source,
        language=request.language,
        index=request.index,
    )
    return cell.model_dump(mode="json")


@app.put("/notebooks/{notebook_id}/cells/{cell_id}")
async def update_cell(
    notebook_id: str,
    cell_id: str,
    request: UpdateCellRequest,
    services: ServiceContainer = Depends(get_container),
):
    cell = services.notebooks.update_cell(
        notebook_id, cell_id, source=request.source, metadata=request.metadata
    )
    return cell.model_dump(mode="json")


@app.delete("/notebooks/{notebook_id}/cells/{cell_id}")
async def delete_cell(
    notebook_id: str, cell_id: str, services: ServiceContainer = Depends(get_container)
):
    if not services.notebooks.delete_cell(notebook_id, cell_id):
        raise NotFoundError(f"Cell {cell_id} not found", {"cell_id": cell_id})
    return {"id": cell_id, "deleted": True}


@app.post("/notebooks/{notebook_id}/cells/{cell_id}/run")
async def run_cell(
    notebook_id: str,
    cell_id: str,
    request: RunCellRequest | None = None,
    services: ServiceContainer = Depends(get_container),
):
    """
    Execute a code cell in the sandbox.

    Errors raised by the cell's code come back as a failed execution
    with status 200; a missed deadline is a 408.
    """
    timeout = request.timeout if request else None
    execution = await services.notebooks.execute_cell(notebook_id, cell_id, timeout=timeout)
    return execution.model_dump(mode="json")


@app.get("/notebooks/{notebook_id}/export")
async def export_notebook(
    notebook_id: str,
    format: str = Query(default="srcmd", pattern="^(srcmd|json)$"),
    services: ServiceContainer = Depends(get_container),
):
    if format == "json":
        return services.notebooks.export_to_json(notebook_id)
    return PlainTextResponse(
        services.notebooks.export_to_srcmd(notebook_id), media_type="text/markdown"
    )


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ReasonKit API",
        "version": __version__,
        "description": "Session-scoped reasoning state, knowledge graphs and sandboxed notebooks",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
