"""FastAPI application factory."""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mafialog.api.routes import log
from mafialog.api.schemas import StatusResponse
from mafialog.core.timeline import Timeline
from mafialog.version import __version__


def create_app(
    timeline: Timeline,
    log_path: Optional[Path] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        timeline: Finalized timeline to serve
        log_path: Path of the log the timeline was parsed from

    Returns:
        Configured FastAPI application
    """
    if not timeline.has_summary:
        raise ValueError("The timeline has to be finalized before it can be served")

    app = FastAPI(
        title="mafialog API",
        description="Read-only queries over a parsed KoLmafia ascension log",
        version=__version__,
    )

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Dependency override for timeline injection
    def get_timeline() -> Timeline:
        return timeline

    app.dependency_overrides[log.get_timeline] = get_timeline

    app.include_router(log.router)

    app.state.timeline = timeline
    app.state.log_path = log_path

    @app.get("/api/status", response_model=StatusResponse, tags=["status"])
    def get_status() -> StatusResponse:
        """Get server status."""
        return StatusResponse(
            status="ok",
            log_name=timeline.log_name,
            log_path=str(log_path) if log_path else None,
            character_class=str(timeline.character_class),
            ascension_path=str(timeline.ascension_path),
            game_mode=str(timeline.game_mode),
            last_turn=timeline.last_turn.turn_number,
            day_count=len(timeline.day_changes),
        )

    return app
