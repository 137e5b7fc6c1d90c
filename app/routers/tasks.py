from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.deps import authenticate_user, get_current_user
from app.core.responses import ApiError, ApiErrors, success
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from app.services.cleanup_service import cleanup_completed_tasks, plural, preview_cleanup_for_user

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _get_own_task(db: Session, task_id: int, user: User) -> Task:
    task = db.query(Task).filter(
        Task.id == task_id,
        Task.user_id == user.id
    ).first()
    if not task:
        raise ApiErrors.NOT_FOUND("Task")
    return task


def _check_project(db: Session, project_id: Optional[int], user: User) -> None:
    if project_id is None:
        return
    project = db.query(Project).filter(Project.id == project_id, Project.user_id == user.id).first()
    if not project:
        raise ApiErrors.NOT_FOUND("Project")


def apply_completion(task: Task, completed: bool) -> None:
    """Coche/décoche une tâche en gardant completed_at cohérent."""
    if completed and not task.completed:
        task.completed_at = datetime.utcnow()
        task.progress = 100
    elif not completed:
        task.completed_at = None
    task.completed = completed


@router.post("")
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    _check_project(db, task_data.project_id, current_user)

    new_task = Task(user_id=current_user.id, **task_data.model_dump())
    db.add(new_task)
    db.commit()
    db.refresh(new_task)
    return success(TaskResponse.serialize(new_task), status.HTTP_201_CREATED)


@router.get("")
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    priority: Optional[str] = Query(None),
    completed: Optional[bool] = Query(None),
    project_id: Optional[int] = Query(None, alias="projectId")
):
    query = db.query(Task).filter(Task.user_id == current_user.id)

    if priority:
        query = query.filter(Task.priority == priority)
    if completed is not None:
        query = query.filter(Task.completed == completed)
    if project_id:
        query = query.filter(Task.project_id == project_id)

    tasks = query.order_by(Task.created_at.desc(), Task.id.desc()).all()
    return success([TaskResponse.serialize(t) for t in tasks])


# ========== CLEANUP DES TÂCHES TERMINÉES ==========

def _preview_message(preview: dict, verb: str) -> str:
    return (
        f"{plural(preview['tasksToDelete'], 'completed task')} {verb} "
        f"(older than {preview['retentionDays']} days)"
    )


@router.post("/cleanup-completed")
def cleanup_completed(
    action: str = Query("cleanup-all"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    authorization: Optional[str] = Header(None),
    x_cron_secret: Optional[str] = Header(None)
):
    """
    - preview : aperçu pour l'utilisateur connecté
    - cleanup-all : nettoyage global, admin ou secret cron
    """
    # Le secret cron n'est accepté que s'il est configuré
    is_cron_job = bool(settings.CRON_SECRET) and x_cron_secret == settings.CRON_SECRET

    user = None
    if not is_cron_job:
        user = authenticate_user(db, settings, authorization)

    if action == "preview":
        # l'aperçu porte toujours sur un utilisateur, même appelé par le cron
        if user is None:
            user = authenticate_user(db, settings, authorization)
        preview = preview_cleanup_for_user(db, user.id, default_days=settings.DEFAULT_RETENTION_DAYS)
        return success({
            "action": "preview",
            **preview,
            "message": _preview_message(preview, "would be deleted"),
        })

    if action == "cleanup-all":
        if not is_cron_job and not user.is_admin:
            raise ApiErrors.FORBIDDEN("Admin privileges required for system-wide cleanup")

        result = cleanup_completed_tasks(db, default_days=settings.DEFAULT_RETENTION_DAYS)
        return success({"action": "cleanup-all", **result.to_dict()})

    raise ApiError(400, f"Unknown action: {action}", "INVALID_ACTION")


@router.get("/cleanup-completed")
def cleanup_preview(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    preview = preview_cleanup_for_user(db, current_user.id, default_days=settings.DEFAULT_RETENTION_DAYS)
    return success({**preview, "message": _preview_message(preview, "eligible for cleanup")})


# ========== CRUD PAR ID ==========

@router.get("/{task_id}")
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success(TaskResponse.serialize(_get_own_task(db, task_id, current_user)))


@router.put("/{task_id}")
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_own_task(db, task_id, current_user)

    update_data = task_data.model_dump(exclude_unset=True)
    if "project_id" in update_data:
        _check_project(db, update_data["project_id"], current_user)

    completed = update_data.pop("completed", None)
    for field, value in update_data.items():
        setattr(task, field, value)
    if completed is not None:
        apply_completion(task, completed)

    db.commit()
    db.refresh(task)
    return success(TaskResponse.serialize(task))


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_own_task(db, task_id, current_user)
    db.delete(task)
    db.commit()
    return success({"id": task_id})
