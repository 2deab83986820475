"""
Scrape job endpoints.

Endpoints:
    POST /api/scrape - Start a scrape job, returns its session id
    GET /api/status/{session_id} - Latest progress snapshot
    GET /api/download/{session_id} - Collected places as a JSON attachment
    POST /api/cancel/{session_id} - Cancel a running job
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.api.schemas import CancelResponse, ErrorResponse, ScrapeAccepted, ScrapeRequest, SessionStatus
from src.core.logging import get_logger
from src.scraper.file_manager import records_to_json, results_filename
from src.sessions.jobs import CancelOutcome, JobRunner
from src.utils.url_utils import validate_url

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["scrape"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def get_runner(request: Request) -> JobRunner:
    return request.app.state.runner


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/scrape",
    response_model=ScrapeAccepted,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}},
)
async def start_scrape(body: ScrapeRequest, runner: JobRunner = Depends(get_runner)):
    """
    Start a scrape job in the background.

    Returns immediately with a session id for status polling.
    """
    if not body.list_url:
        return _error(status.HTTP_400_BAD_REQUEST, "List URL is required")
    if not validate_url(body.list_url):
        return _error(status.HTTP_400_BAD_REQUEST, "List URL must be an absolute http(s) URL")

    max_items = body.max_items or runner.config.default_max_items
    session_id = runner.submit(body.list_url, max_items)
    return ScrapeAccepted(session_id=session_id)


@router.get(
    "/status/{session_id}",
    response_model=SessionStatus,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def get_status(session_id: str, runner: JobRunner = Depends(get_runner)):
    session = runner.tracker.get(session_id)
    if session is None:
        return _error(status.HTTP_404_NOT_FOUND, "Session not found")
    return session.to_public()


@router.get("/download/{session_id}", responses=NOT_FOUND)
async def download_results(session_id: str, runner: JobRunner = Depends(get_runner)):
    session = runner.tracker.get(session_id)
    if session is None or session.results is None:
        return _error(status.HTTP_404_NOT_FOUND, "Results not found")
    return JSONResponse(
        content=records_to_json(session.results),
        headers={"Content-Disposition": f'attachment; filename="{results_filename(session_id)}"'},
    )


@router.post(
    "/cancel/{session_id}",
    response_model=CancelResponse,
    response_model_by_alias=True,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
async def cancel_scrape(session_id: str, runner: JobRunner = Depends(get_runner)):
    outcome = runner.cancel(session_id)
    if outcome is CancelOutcome.NOT_FOUND:
        return _error(status.HTTP_404_NOT_FOUND, "Session not found")
    if outcome is CancelOutcome.ALREADY_FINISHED:
        return _error(status.HTTP_409_CONFLICT, "Session already finished")
    return CancelResponse(session_id=session_id, status=outcome.value)
