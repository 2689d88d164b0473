"""Scheduled trigger endpoints.

An external scheduler calls these on a fixed cadence. Each call runs one
unit of work to completion on a fresh session and returns a summary.
"""

from __future__ import annotations

from typing import Iterator

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..dependencies import verify_cron_secret
from ..jobs import check_games, drain_one
from ..live import MLBLiveFeedClient
from ..models import DrainOutcome
from ..social import SocialPoster

router = APIRouter(
    prefix="/api/cron",
    tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)


class CheckGamesResponse(BaseModel):
    success: bool
    message: str
    summary: dict[str, int]


class ProcessGamesResponse(BaseModel):
    success: bool
    message: str
    outcome: DrainOutcome


def get_feed_client() -> Iterator[MLBLiveFeedClient]:
    client = MLBLiveFeedClient()
    try:
        yield client
    finally:
        client.close()


def get_poster() -> SocialPoster:
    return SocialPoster()


@router.get("/check-games", response_model=CheckGamesResponse)
def run_check_games(
    session: Session = Depends(get_db),
    feed_client: MLBLiveFeedClient = Depends(get_feed_client),
    poster: SocialPoster = Depends(get_poster),
) -> CheckGamesResponse:
    summary = check_games(session, feed_client, poster)
    return CheckGamesResponse(
        success=True,
        message=f"Game check complete. Processed {summary.games_seen} games.",
        summary=summary.as_dict(),
    )


@router.get("/process-games", response_model=ProcessGamesResponse)
def run_process_games(
    session: Session = Depends(get_db),
    poster: SocialPoster = Depends(get_poster),
) -> ProcessGamesResponse:
    outcome = drain_one(session, poster)
    messages = {
        DrainOutcome.empty: "Queue is empty.",
        DrainOutcome.delivered: "Queued post delivered.",
        DrainOutcome.discarded_stale: "Stale queued post discarded.",
        DrainOutcome.already_posted: "Queued post was already recorded; removed.",
        DrainOutcome.retry_later: "Queued post still rate limited; will retry.",
        DrainOutcome.error: "Queued post failed; will retry.",
    }
    return ProcessGamesResponse(success=True, message=messages[outcome], outcome=outcome)
