"""
Formatage des réponses de l'API bot.

Fonctions pures : aucune requête, aucun effet de bord. Un champ optionnel
absent est rendu en `None` (null en JSON), jamais omis.
"""

from datetime import date, datetime
from typing import Any, Optional

from app.services.quadrant_map import priority_to_quadrant, quadrant_name


def _timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def _calendar_date(value) -> Optional[str]:
    # Les colonnes Date donnent un date, un datetime reste possible côté appelant
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def format_task_for_bot(task: Any) -> dict:
    priority = getattr(task, "priority", None)
    project = getattr(task, "project", None)
    return {
        "id": task.id,
        "title": task.title,
        "description": getattr(task, "description", None) or None,
        "quadrant": priority_to_quadrant(priority),
        "quadrantName": quadrant_name(priority),
        "completed": bool(getattr(task, "completed", False)),
        "completedAt": _timestamp(getattr(task, "completed_at", None)),
        "progress": getattr(task, "progress", None) or 0,
        "status": getattr(task, "status", None) or "TODO",
        "startDate": _calendar_date(getattr(task, "start_date", None)),
        "startTime": getattr(task, "start_time", None) or None,
        "dueDate": _calendar_date(getattr(task, "due_date", None)),
        "dueTime": getattr(task, "due_time", None) or None,
        "projectId": getattr(task, "project_id", None),
        "projectName": getattr(project, "name", None) if project is not None else None,
        "assignedToBotId": getattr(task, "assigned_to_bot_id", None),
        "userId": getattr(task, "user_id", None),
        "createdAt": _timestamp(getattr(task, "created_at", None)),
        "updatedAt": _timestamp(getattr(task, "updated_at", None)),
    }


def comment_author(comment: Any) -> dict:
    """Auteur d'un commentaire : bot, utilisateur ou inconnu."""
    bot = getattr(comment, "bot", None)
    if bot is not None:
        return {"type": "bot", "id": bot.id, "name": bot.name}
    user_id = getattr(comment, "user_id", None)
    if user_id is not None:
        return {"type": "user", "id": user_id}
    return {"type": "unknown"}


def format_comment_for_bot(comment: Any) -> dict:
    return {
        "id": comment.id,
        "taskId": getattr(comment, "task_id", None),
        "body": comment.body,
        "metadata": getattr(comment, "comment_metadata", None) or None,
        "author": comment_author(comment),
        "createdAt": _timestamp(getattr(comment, "created_at", None)),
        "updatedAt": _timestamp(getattr(comment, "updated_at", None)),
    }


def format_artifact_for_bot(artifact: Any) -> dict:
    return {
        "id": artifact.id,
        "taskId": getattr(artifact, "task_id", None),
        "botId": getattr(artifact, "bot_id", None),
        "fileName": getattr(artifact, "file_name", None),
        "mimeType": getattr(artifact, "mime_type", None),
        "sizeBytes": getattr(artifact, "size_bytes", None),
        "createdAt": _timestamp(getattr(artifact, "created_at", None)),
    }
