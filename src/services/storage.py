import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db.models import Result, Survey

logger = logging.getLogger(__name__)


async def get_survey(session: AsyncSession, survey_id: uuid.UUID) -> Optional[Survey]:
    return await session.get(Survey, survey_id)


async def list_surveys(
    session: AsyncSession,
    language: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Survey]:
    """Active surveys, newest first, optionally filtered by language and category."""
    stmt = select(Survey).where(Survey.is_active.is_(True))
    if language:
        stmt = stmt.where(Survey.language == language)
    if category:
        stmt = stmt.where(Survey.category == category)
    stmt = stmt.order_by(Survey.created_at.desc())
    return list((await session.scalars(stmt)).all())


async def create_result(
    session: AsyncSession,
    *,
    survey_id: uuid.UUID,
    user_id: Optional[str],
    answers: Dict[str, Any],
    results: Dict[str, Any],
    time_spent: int = 0,
    session_id: Optional[str] = None,
) -> Result:
    """Stores one completed submission as a single record."""
    result = Result(
        user_id=user_id,
        survey_id=survey_id,
        answers_json=answers,
        results_json=results,
        time_spent=time_spent or 0,
        session_id=session_id or str(uuid.uuid4()),
        is_completed=True,
    )
    session.add(result)
    await session.flush()
    logger.info(f"Stored result {result.id} for survey {survey_id} (user={user_id}, session={result.session_id})")
    return result


async def list_user_results(
    session: AsyncSession,
    user_id: str,
    survey_id: Optional[uuid.UUID] = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Result], int]:
    """A page of the user's completed results, newest first, and the total count."""
    conditions = [Result.user_id == user_id, Result.is_completed.is_(True)]
    if survey_id is not None:
        conditions.append(Result.survey_id == survey_id)

    total = await session.scalar(select(func.count()).select_from(Result).where(*conditions))
    stmt = (
        select(Result)
        .where(*conditions)
        .options(selectinload(Result.survey))
        .order_by(Result.completed_at.desc())
        .limit(limit)
        .offset(offset)
    )
    rows = list((await session.scalars(stmt)).all())
    return rows, total or 0


async def get_result(
    session: AsyncSession,
    result_id: uuid.UUID,
    user_id: Optional[str] = None,
) -> Optional[Result]:
    """A completed result, restricted to the given owner when ``user_id`` is set."""
    stmt = (
        select(Result)
        .where(Result.id == result_id, Result.is_completed.is_(True))
        .options(selectinload(Result.survey))
    )
    if user_id is not None:
        stmt = stmt.where(Result.user_id == user_id)
    return await session.scalar(stmt)


async def get_survey_stats(session: AsyncSession, survey_id: uuid.UUID, recent_limit: int = 10) -> Dict[str, Any]:
    """Response count, mean time spent and the most recent completions for a survey."""
    total = await session.scalar(
        select(func.count()).select_from(Result).where(
            Result.survey_id == survey_id, Result.is_completed.is_(True)
        )
    )
    average_time = await session.scalar(
        select(func.avg(Result.time_spent)).where(
            Result.survey_id == survey_id, Result.time_spent.is_not(None)
        )
    )
    recent = await session.execute(
        select(Result.completed_at, Result.time_spent)
        .where(Result.survey_id == survey_id, Result.is_completed.is_(True))
        .order_by(Result.completed_at.desc())
        .limit(recent_limit)
    )
    return {
        "total_responses": total or 0,
        "average_time": float(average_time) if average_time is not None else None,
        "recent_activity": [
            {"completed_at": completed_at, "time_spent": time_spent}
            for completed_at, time_spent in recent.all()
        ],
    }
