"""Submission intake: validation, anti-abuse gating and identity resolution."""

import logging
import math
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from friday.database.repositories import SubmissionRepository
from friday.database.repositories.submissions import RECENT_WINDOW
from friday.errors import ConstraintViolation, RateLimitExceeded, StoreFailure, ValidationError
from friday.models import INSTANCE_ID_PATTERN, UNKNOWN_LABEL
from friday.schemas import SubmissionRequest
from friday.services.locks import IdentityLocks
from friday.services.ranking import RankingEngine
from friday.utils.time_utils import utc_iso_now

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100
RATE_LIMIT_RETRY_AFTER = 3600
MAX_WRITE_ATTEMPTS = 2

_instance_id_re = re.compile(INSTANCE_ID_PATTERN)


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata captured server-side."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one accepted submission."""

    updated: bool
    rank: int
    total_participants: int
    percentile: int
    instance_id: str
    handle: Optional[str]


def normalize_handle(handle: Optional[str]) -> Optional[str]:
    """Drop one leading '@' and surrounding whitespace; empty means no handle."""
    if not handle:
        return None
    if handle.startswith("@"):
        handle = handle[1:]
    return handle.strip() or None


def validate_submission(payload: SubmissionRequest) -> Tuple[str, int]:
    """Check required fields, score range and instance id format."""
    if not payload.instance_id or payload.score is None:
        raise ValidationError("Missing required fields: instance_id, score")

    score = payload.score
    if not math.isfinite(score) or score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")
    if score != int(score):
        raise ValidationError("Score must be a whole number")

    if not _instance_id_re.fullmatch(payload.instance_id):
        raise ValidationError("Invalid instance_id format")

    return payload.instance_id, int(score)


class SubmissionService:
    """
    Decides insert-vs-update for a submission and reports its ranking.

    Identity resolution prefers the handle, then the instance id. The
    anti-abuse check, the resolution, the write and the ranking all run
    while holding the locks for both identities, so two requests for the
    same participant cannot both see "no row yet" and insert twice. A
    unique-key collision that still slips through (another process, or the
    handle and instance id pointing at two different rows) is re-resolved
    once before giving up.
    """

    def __init__(
        self,
        session: Session,
        locks: IdentityLocks,
        rate_limit: int,
        recent_window: timedelta = RECENT_WINDOW,
    ):
        self.session = session
        self.locks = locks
        self.rate_limit = rate_limit
        self.recent_window = recent_window
        self.repository = SubmissionRepository(session)
        self.ranking = RankingEngine(self.repository)

    def submit(self, payload: SubmissionRequest, client: ClientInfo) -> SubmissionResult:
        instance_id, score = validate_submission(payload)
        handle = normalize_handle(payload.handle)
        fields = self._build_fields(payload, instance_id, handle, score, client)

        with self.locks.hold(
            f"handle:{handle}" if handle else None,
            f"instance:{instance_id}",
        ):
            try:
                recent = self.repository.count_recent_by_ip(
                    client.ip_address, window=self.recent_window
                )
                if recent >= self.rate_limit:
                    logger.warning(
                        f"Submission throttled for {client.ip_address}: "
                        f"{recent} in the last {self.recent_window}"
                    )
                    raise RateLimitExceeded(retry_after=RATE_LIMIT_RETRY_AFTER)

                updated = self._write_with_retry(fields, instance_id, handle)
                ranking = self.ranking.rank_score(score)
            except (SQLAlchemyError, OverflowError) as e:
                self.session.rollback()
                logger.exception(f"Submission error for {instance_id}")
                raise StoreFailure("Failed to submit to leaderboard", detail=str(e)) from e

        logger.info(
            f"Submission {'updated' if updated else 'created'}: {instance_id} "
            f"score={score} rank={ranking.rank}/{ranking.total}"
        )
        return SubmissionResult(
            updated=updated,
            rank=ranking.rank,
            total_participants=ranking.total,
            percentile=ranking.percentile,
            instance_id=instance_id,
            handle=handle,
        )

    @staticmethod
    def _build_fields(
        payload: SubmissionRequest,
        instance_id: str,
        handle: Optional[str],
        score: int,
        client: ClientInfo,
    ) -> Dict[str, Any]:
        return {
            "instance_id": instance_id,
            "handle": handle,
            "score": score,
            "os": payload.os or UNKNOWN_LABEL,
            "arch": payload.arch or UNKNOWN_LABEL,
            "timestamp": payload.timestamp or utc_iso_now(),
            "network_score": payload.network_score or 0,
            "perm_score": payload.perm_score or 0,
            "gateway_score": payload.gateway_score or 0,
            "channel_score": payload.channel_score or 0,
            "skill_score": payload.skill_score or 0,
            "ip_address": client.ip_address,
            "user_agent": client.user_agent,
        }

    def _write_with_retry(
        self, fields: Dict[str, Any], instance_id: str, handle: Optional[str]
    ) -> bool:
        collision: Optional[ConstraintViolation] = None
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                updated = self._resolve_and_write(fields, instance_id, handle)
                self.session.commit()
                return updated
            except ConstraintViolation as e:
                collision = e
                logger.warning(
                    f"Identity collision for {instance_id} (handle={handle}), "
                    f"attempt {attempt}/{MAX_WRITE_ATTEMPTS}: {e.detail}"
                )

        raise ConstraintViolation(
            "Failed to submit to leaderboard", detail=collision.detail
        ) from collision

    def _resolve_and_write(
        self, fields: Dict[str, Any], instance_id: str, handle: Optional[str]
    ) -> bool:
        """Returns True when an existing row was updated."""
        if handle and self.repository.find_by_handle(handle) is not None:
            if self.repository.update_by_handle(handle, fields):
                return True

        if self.repository.find_by_instance_id(instance_id) is not None:
            if self.repository.update_by_instance_id(instance_id, fields):
                return True

        self.repository.insert(fields)
        return False
