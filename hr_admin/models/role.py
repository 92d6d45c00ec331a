from sqlalchemy import Column, String, Uuid
import uuid

from hr_admin.database import Base

ADMIN = "ADMIN"
HR = "HR"
MANAGER = "MANAGER"
EMPLOYEE = "EMPLOYEE"

ALL_ROLES = (ADMIN, HR, MANAGER, EMPLOYEE)


class Role(Base):
    __tablename__ = 'roles'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
