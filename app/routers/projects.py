from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.responses import success
from app.models.project import Project
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectResponse

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("")
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = Project(user_id=current_user.id, name=project_data.name)
    if project_data.color:
        project.color = project_data.color
    db.add(project)
    db.commit()
    db.refresh(project)
    return success(ProjectResponse.serialize(project), status.HTTP_201_CREATED)


@router.get("")
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = db.query(Project).filter(Project.user_id == current_user.id).order_by(Project.created_at.asc()).all()
    return success([ProjectResponse.serialize(p) for p in projects])
