"""
API d'automatisation pour les bots (clé API en Bearer).

Chaque réponse porte les headers X-RateLimit-*.
"""

import logging
from datetime import datetime, time
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Query as SAQuery, Session

from app.core.database import get_db
from app.core.deps import BotContext, get_bot_context
from app.core.responses import ApiError, ApiErrors, success
from app.models.project import Project
from app.models.task import Task
from app.models.task_artifact import TaskArtifact
from app.models.task_comment import TaskComment
from app.routers.tasks import apply_completion
from app.schemas.bot import BotTaskCreate, BotTaskUpdate, CommentCreate
from app.schemas.task import TASK_STATUSES
from app.services.bot_access import BotPermission, bot_can_access_project, parse_permissions
from app.services.bot_formatter import format_artifact_for_bot, format_comment_for_bot, format_task_for_bot
from app.services.quadrant_map import is_valid_quadrant, quadrant_to_priority

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bot", tags=["bot"])

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _page_size(limit: Optional[int]) -> int:
    size = DEFAULT_PAGE_SIZE if limit is None else limit
    return min(max(size, 1), MAX_PAGE_SIZE)


def _parse_cursor(cursor: str) -> Tuple[datetime, int]:
    """Curseur "createdAt|id" renvoyé par la page précédente"""
    try:
        created_at, item_id = cursor.split("|", 1)
        return datetime.fromisoformat(created_at), int(item_id)
    except ValueError:
        raise ApiErrors.INVALID_INPUT("Invalid cursor")


def _cursor_for(item) -> str:
    return f"{item.created_at.isoformat()}|{item.id}"


def _paginate(query: SAQuery, model, limit: int, cursor: Optional[str], newest_first: bool):
    if cursor:
        cursor_date, cursor_id = _parse_cursor(cursor)
        if newest_first:
            query = query.filter(or_(
                model.created_at < cursor_date,
                and_(model.created_at == cursor_date, model.id < cursor_id)
            ))
        else:
            query = query.filter(or_(
                model.created_at > cursor_date,
                and_(model.created_at == cursor_date, model.id > cursor_id)
            ))

    if newest_first:
        query = query.order_by(model.created_at.desc(), model.id.desc())
    else:
        query = query.order_by(model.created_at.asc(), model.id.asc())

    # un élément de plus pour savoir s'il reste une page
    items = query.limit(limit + 1).all()
    has_more = len(items) > limit
    items = items[:limit]
    next_cursor = _cursor_for(items[-1]) if has_more and items else None
    return items, {"limit": limit, "hasMore": has_more, "nextCursor": next_cursor}


def _project_denied(ctx: BotContext) -> ApiError:
    return ApiError(403, "Bot cannot access this project", "BOT_PROJECT_ACCESS_DENIED", headers=ctx.headers)


def _get_accessible_task(db: Session, ctx: BotContext, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise ApiErrors.NOT_FOUND("Task")
    if task.assigned_to_bot_id == ctx.bot.id:
        return task
    if not bot_can_access_project(db, ctx.bot, task.project_id):
        raise _project_denied(ctx)
    return task


def _parse_time(value: Optional[str], field: str) -> Optional[time]:
    if not value:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise ApiErrors.INVALID_INPUT(f"{field} must be HH:MM")


def _validate_quadrant(quadrant: str) -> str:
    if not is_valid_quadrant(quadrant):
        raise ApiError(400, "Invalid quadrant. Use q1, q2, q3, or q4", "INVALID_QUADRANT")
    return quadrant_to_priority(quadrant)


@router.get("/me")
def me(ctx: BotContext = Depends(get_bot_context)):
    bot = ctx.bot
    return success({
        "id": bot.id,
        "name": bot.name,
        "description": bot.description,
        "permissions": sorted(p.value for p in parse_permissions(bot.permissions)),
        "projectIds": bot.project_ids or [],
        "rateLimitPerMinute": bot.rate_limit_per_minute,
        "webhookUrl": bot.webhook_url,
        "owner": {"id": bot.owner.id, "email": bot.owner.email},
        "lastUsedAt": bot.last_used_at,
        "createdAt": bot.created_at,
    }, headers=ctx.headers)


@router.get("/tasks")
def list_tasks(
    ctx: BotContext = Depends(get_bot_context),
    db: Session = Depends(get_db),
    project_id: Optional[int] = Query(None, alias="projectId"),
    completed: Optional[bool] = Query(None),
    assigned_to_bot: bool = Query(False, alias="assignedToBot"),
    status_filter: Optional[str] = Query(None, alias="status"),
    cursor: Optional[str] = Query(None),
    limit: Optional[int] = Query(None)
):
    ctx.require(BotPermission.TASKS_READ)
    bot = ctx.bot

    query = db.query(Task)
    if assigned_to_bot:
        # pas de filtre projet : la tâche assignée peut vivre dans un sous-projet
        query = query.filter(Task.assigned_to_bot_id == bot.id)
    elif project_id is not None:
        if not bot_can_access_project(db, bot, project_id):
            raise _project_denied(ctx)
        query = query.filter(Task.project_id == project_id)
    elif bot.project_ids:
        query = query.filter(Task.project_id.in_(bot.project_ids))
    else:
        # même périmètre que bot_can_access_project : les projets du owner
        owner_projects = select(Project.id).where(Project.user_id == bot.owner_id)
        query = query.filter(Task.project_id.in_(owner_projects))

    if completed is not None:
        query = query.filter(Task.completed == completed)

    if status_filter:
        if status_filter not in TASK_STATUSES:
            raise ApiError(
                400,
                f"Invalid status filter. Use {', '.join(TASK_STATUSES)}",
                "INVALID_STATUS",
            )
        query = query.filter(Task.status == status_filter)

    tasks, pagination = _paginate(query, Task, _page_size(limit), cursor, newest_first=True)
    return success({
        "tasks": [format_task_for_bot(t) for t in tasks],
        "pagination": pagination,
    }, headers=ctx.headers)


@router.post("/tasks")
def create_task(
    body: BotTaskCreate,
    ctx: BotContext = Depends(get_bot_context),
    db: Session = Depends(get_db)
):
    ctx.require(BotPermission.TASKS_WRITE)
    bot = ctx.bot

    if not body.title or not body.title.strip():
        raise ApiErrors.MISSING_REQUIRED_FIELD("title")
    if body.project_id is None:
        raise ApiErrors.MISSING_REQUIRED_FIELD("projectId")
    if not bot_can_access_project(db, bot, body.project_id):
        raise _project_denied(ctx)

    priority = _validate_quadrant(body.quadrant) if body.quadrant else None

    start_time = _parse_time(body.start_time, "startTime")
    due_time = _parse_time(body.due_time, "dueTime")
    if body.start_date and body.due_date:
        start = datetime.combine(body.start_date, start_time or time(0, 0))
        due = datetime.combine(body.due_date, due_time or time(23, 59))
        if due < start:
            raise ApiError(400, "Due date cannot be earlier than start date", "INVALID_DATE_RANGE")

    task = Task(
        user_id=bot.owner_id,  # la tâche appartient au propriétaire du bot
        project_id=body.project_id,
        title=body.title.strip(),
        description=(body.description or "").strip() or None,
        priority=priority,
        start_date=body.start_date,
        start_time=body.start_time or None,
        due_date=body.due_date,
        due_time=body.due_time or None,
        assigned_to_bot_id=bot.id if body.assign_to_self else None,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Bot {bot.id} created task {task.id}")

    return success(format_task_for_bot(task), status.HTTP_201_CREATED, headers=ctx.headers)


@router.get("/tasks/{task_id}")
def get_task(task_id: int, ctx: BotContext = Depends(get_bot_context), db: Session = Depends(get_db)):
    ctx.require(BotPermission.TASKS_READ)
    task = _get_accessible_task(db, ctx, task_id)
    return success(format_task_for_bot(task), headers=ctx.headers)


@router.patch("/tasks/{task_id}")
def update_task(
    task_id: int,
    body: BotTaskUpdate,
    ctx: BotContext = Depends(get_bot_context),
    db: Session = Depends(get_db)
):
    ctx.require(BotPermission.TASKS_WRITE)
    task = _get_accessible_task(db, ctx, task_id)

    if body.title is not None:
        if not body.title.strip():
            raise ApiErrors.MISSING_REQUIRED_FIELD("title")
        task.title = body.title.strip()
    if body.description is not None:
        task.description = body.description.strip() or None
    if body.quadrant is not None:
        task.priority = _validate_quadrant(body.quadrant)
    if body.status is not None:
        if body.status not in TASK_STATUSES:
            raise ApiError(400, f"Invalid status. Use {', '.join(TASK_STATUSES)}", "INVALID_STATUS")
        task.status = body.status
    if body.progress is not None:
        task.progress = body.progress
    if body.completed is not None:
        apply_completion(task, body.completed)

    db.commit()
    db.refresh(task)
    logger.info(f"Bot {ctx.bot.id} updated task {task.id}")
    return success(format_task_for_bot(task), headers=ctx.headers)


@router.get("/tasks/{task_id}/comments")
def list_comments(
    task_id: int,
    ctx: BotContext = Depends(get_bot_context),
    db: Session = Depends(get_db),
    cursor: Optional[str] = Query(None),
    limit: Optional[int] = Query(None)
):
    ctx.require(BotPermission.COMMENTS_READ)
    _get_accessible_task(db, ctx, task_id)

    query = db.query(TaskComment).filter(TaskComment.task_id == task_id)
    comments, pagination = _paginate(query, TaskComment, _page_size(limit), cursor, newest_first=False)
    return success({
        "comments": [format_comment_for_bot(c) for c in comments],
        "pagination": pagination,
    }, headers=ctx.headers)


@router.post("/tasks/{task_id}/comments")
def add_comment(
    task_id: int,
    body: CommentCreate,
    ctx: BotContext = Depends(get_bot_context),
    db: Session = Depends(get_db)
):
    ctx.require(BotPermission.COMMENTS_WRITE)
    _get_accessible_task(db, ctx, task_id)

    if not body.body or not body.body.strip():
        raise ApiErrors.MISSING_REQUIRED_FIELD("body")

    comment = TaskComment(
        task_id=task_id,
        bot_id=ctx.bot.id,
        body=body.body.strip(),
        comment_metadata=body.metadata or None,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return success(format_comment_for_bot(comment), status.HTTP_201_CREATED, headers=ctx.headers)


@router.get("/tasks/{task_id}/artifacts")
def list_artifacts(task_id: int, ctx: BotContext = Depends(get_bot_context), db: Session = Depends(get_db)):
    ctx.require(BotPermission.ARTIFACTS_READ)
    _get_accessible_task(db, ctx, task_id)

    artifacts = db.query(TaskArtifact).filter(
        TaskArtifact.task_id == task_id
    ).order_by(TaskArtifact.created_at.desc()).all()
    return success({"artifacts": [format_artifact_for_bot(a) for a in artifacts]}, headers=ctx.headers)
