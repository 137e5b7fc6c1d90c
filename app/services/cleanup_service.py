"""
Nettoyage des tâches terminées selon la rétention de chaque utilisateur.

Règles :
- seules les tâches completed = True sont concernées
- completed_at doit être plus ancien que now - rétention
- les modèles de tâches récurrentes (is_recurring) ne sont jamais supprimés
- la rétention utilisateur est plafonnée par son plan (FREE 90 j, PRO/ENTERPRISE 365 j)
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query

from app.core.responses import ApiErrors
from app.models.task import Task
from app.models.task_artifact import TaskArtifact
from app.models.task_comment import TaskComment
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30

RETENTION_LIMITS = {
    "FREE": 90,
    "PRO": 365,
    "ENTERPRISE": 365,
}


@dataclass
class CleanupResult:
    success: bool
    tasks_deleted: int
    users_processed: int
    errors: List[dict] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "success": data["success"],
            "tasksDeleted": data["tasks_deleted"],
            "usersProcessed": data["users_processed"],
            "errors": data["errors"],
            "message": data["message"],
        }


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def user_plan(user: User) -> str:
    if user.subscription is not None and user.subscription.plan:
        return user.subscription.plan
    return "FREE"


def plan_limit(plan: str) -> int:
    return RETENTION_LIMITS.get(plan, RETENTION_LIMITS["FREE"])


def effective_retention_days(user_retention_days: Optional[int], plan: str,
                             default_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Rétention effective : réglage utilisateur (ou défaut) plafonné par le plan."""
    requested = user_retention_days if user_retention_days is not None else default_days
    return min(requested, plan_limit(plan))


def _eligible_tasks(db: Session, user_id: int, cutoff: datetime) -> Query:
    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.completed == True,
        Task.completed_at < cutoff,
        Task.is_recurring == False
    )


def _delete_tasks(db: Session, task_ids: List[int]) -> int:
    db.query(TaskComment).filter(TaskComment.task_id.in_(task_ids)).delete(synchronize_session=False)
    db.query(TaskArtifact).filter(TaskArtifact.task_id.in_(task_ids)).delete(synchronize_session=False)
    return db.query(Task).filter(Task.id.in_(task_ids)).delete(synchronize_session=False)


def preview_cleanup_for_user(db: Session, user_id: int, now: Optional[datetime] = None,
                             default_days: int = DEFAULT_RETENTION_DAYS) -> dict:
    """Ce que le nettoyage supprimerait pour un utilisateur. Lecture seule."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ApiErrors.USER_NOT_FOUND()

    now = now or datetime.utcnow()
    plan = user_plan(user)
    retention = effective_retention_days(user.completed_task_retention_days, plan, default_days)
    cutoff = now - timedelta(days=retention)

    tasks_to_delete = _eligible_tasks(db, user.id, cutoff).count()

    oldest = db.query(Task.completed_at).filter(
        Task.user_id == user.id,
        Task.completed == True,
        Task.is_recurring == False,
        Task.completed_at.isnot(None)
    ).order_by(Task.completed_at.asc()).first()

    return {
        "tasksToDelete": tasks_to_delete,
        "oldestTask": oldest[0] if oldest else None,
        "retentionDays": retention,
        "planLimit": plan_limit(plan),
    }


def cleanup_completed_tasks(db: Session, now: Optional[datetime] = None,
                            default_days: int = DEFAULT_RETENTION_DAYS) -> CleanupResult:
    """Supprime, pour tous les utilisateurs, les tâches terminées hors rétention.

    Un passage unique : chaque utilisateur est traité et commité séparément,
    une erreur sur l'un n'arrête pas les autres.
    """
    now = now or datetime.utcnow()
    errors = []
    total_deleted = 0
    users_processed = 0

    users = db.query(User).all()
    logger.info(f"[Task Cleanup] Processing {len(users)} users")

    for user in users:
        try:
            plan = user_plan(user)
            retention = effective_retention_days(user.completed_task_retention_days, plan, default_days)
            cutoff = now - timedelta(days=retention)

            task_ids = [row.id for row in _eligible_tasks(db, user.id, cutoff).with_entities(Task.id)]
            deleted = _delete_tasks(db, task_ids) if task_ids else 0
            db.commit()

            if deleted:
                logger.info(
                    f"[Task Cleanup] Deleted {deleted} tasks for user {user.id} "
                    f"(plan: {plan}, retention: {retention} days)"
                )
                total_deleted += deleted
            users_processed += 1
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Task Cleanup] Error processing user {user.id}: {e}")
            errors.append({"userId": user.id, "error": str(e)})

    message = (
        f"Cleanup complete. Deleted {plural(total_deleted, 'task')} "
        f"from {plural(users_processed, 'user')}."
    )
    if errors:
        message += f" {plural(len(errors), 'error')} occurred."
    logger.info(f"[Task Cleanup] {message}")

    return CleanupResult(
        success=not errors,
        tasks_deleted=total_deleted,
        users_processed=users_processed,
        errors=errors,
        message=message,
    )
