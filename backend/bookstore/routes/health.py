"""
Bookstore Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   The store is in-process memory, so a response at all means the store
       is reachable; the body adds version, book count and uptime.
       Uptime is measured from app.state.started_at, set by create_app, so
       each application instance reports its own age.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request

from bookstore import __version__
from bookstore.config import settings
from bookstore.dependencies import get_book_service
from bookstore.schemas.book import HealthResponse
from bookstore.services.book_service import BookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    request: Request,
    service: BookService = Depends(get_book_service),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        service=settings.service_type_id,
        book_count=service.book_count(),
        uptime_seconds=round(time.time() - request.app.state.started_at, 2),
    )
