from pydantic import BaseModel
from uuid import UUID
from typing import Optional

class RoleInfo(BaseModel):
    id: UUID
    name: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: RoleInfo
    employee_id: Optional[UUID] = None
    is_active: bool

    model_config = {"from_attributes": True}
