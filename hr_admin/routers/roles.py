from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hr_admin.database import get_db
from hr_admin.models.role import Role
from hr_admin.models.user import User
from hr_admin.utils.security import get_current_user
from hr_admin.schemas.role import RoleResponse

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/", response_model=list[RoleResponse])
def get_all_roles(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return db.query(Role).order_by(Role.name).all()
