from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from loguru import logger
from pydantic import StrictBool

from monday_poll.app import App
from monday_poll.errors import AppError
from monday_poll.models import HealthResponse, Summary

router = APIRouter()

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


def get_clock() -> Clock:
    """Source of ``now`` for each request; overridden in tests."""
    return local_now


def get_app(request: Request) -> App:
    return request.app.state.poll_app


@router.get("/", response_model=Summary[int])
async def summary(app: App = Depends(get_app), clock: Clock = Depends(get_clock)):
    try:
        return await app.summary(clock())
    except AppError as exc:
        logger.error(f"[API] GET / failed: {exc}")
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc


@router.post("/")
async def submit(
    answer: StrictBool = Body(..., description="Whether it is Monday"),
    app: App = Depends(get_app),
    clock: Clock = Depends(get_clock),
):
    try:
        await app.submit(clock(), answer)
    except AppError as exc:
        logger.error(f"[API] POST / failed: {exc}")
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc
    return Response(status_code=200)


@router.get("/health", response_model=HealthResponse)
async def health_check(app: App = Depends(get_app)):
    logger.info("Health check endpoint called.")
    return HealthResponse(submissions=await app.surveyor.store.count())
