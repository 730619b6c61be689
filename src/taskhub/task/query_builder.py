"""Helpers for the task repository."""

from uuid import UUID

from sqlalchemy import ColumnElement, and_, case, func, or_, true
from sqlmodel import col, select
from sqlmodel.sql.expression import SelectOfScalar

from .models import Task
from .schemas import TaskFilters
from .task_priority import TaskPriority
from .task_status import TaskStatus

__all__ = ["build_list_query", "build_stats_query"]


def build_list_query(
    owner_user_id: UUID,
    filters: TaskFilters,
    *,
    page: int,
    page_size: int,
) -> SelectOfScalar[Task]:
    """Build the paged SQL query listing a user's tasks.

    Args:
        owner_user_id: Only tasks owned by this user are returned.
        filters: Optional predicates combined with AND.
        page: Page number, starts at 1.
        page_size: Number of rows per page.

    Returns:
        SQLModel select ordered by creation time, oldest first.
    """
    offset = (page - 1) * page_size
    return (
        select(Task)
        .where(col(Task.owner_user_id) == owner_user_id)
        .where(_filter_clause(filters))
        .order_by(col(Task.created_at), col(Task.id))
        .offset(offset)
        .limit(page_size)
    )


def build_stats_query(owner_user_id: UUID | None = None):  # noqa: ANN201
    """Build a single aggregate query counting tasks per status and priority.

    Args:
        owner_user_id: Restrict the counts to one user; ``None`` counts all tasks.

    Returns:
        SQLAlchemy select returning one row with labelled counts.
    """
    query = select(
        func.count().label("total"),
        _count_where(col(Task.status) == TaskStatus.COMPLETED).label("completed"),
        _count_where(col(Task.status) == TaskStatus.IN_PROGRESS).label("in_progress"),
        _count_where(col(Task.status) == TaskStatus.PENDING).label("pending"),
        _count_where(col(Task.priority) == TaskPriority.HIGH).label("high_priority"),
    ).select_from(Task)

    if owner_user_id is not None:
        query = query.where(col(Task.owner_user_id) == owner_user_id)
    return query


# -----------------------------------------------------------------------------
# Utility ---------------------------------------------------------------------
# -----------------------------------------------------------------------------


def _filter_clause(filters: TaskFilters) -> ColumnElement[bool]:
    """Translate the set fields of ``filters`` into one SQL condition."""
    conditions: list[ColumnElement[bool]] = []

    if filters.status is not None:
        conditions.append(col(Task.status) == filters.status)
    if filters.priority is not None:
        conditions.append(col(Task.priority) == filters.priority)
    if filters.from_date is not None:
        conditions.append(col(Task.created_at) >= filters.from_date)
    if filters.to_date is not None:
        conditions.append(col(Task.created_at) <= filters.to_date)
    if filters.search:
        conditions.append(
            or_(
                col(Task.title).icontains(filters.search, autoescape=True),
                col(Task.description).icontains(filters.search, autoescape=True),
            )
        )

    if not conditions:
        return true()
    return and_(*conditions)


def _count_where(condition: ColumnElement[bool]) -> ColumnElement[int]:
    """Portable ``COUNT(*) FILTER (WHERE ...)``."""
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)
