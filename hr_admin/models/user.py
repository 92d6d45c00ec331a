from sqlalchemy import Column, String, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

import uuid

from hr_admin.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(Uuid(as_uuid=True), ForeignKey("roles.id"), nullable=False)
    role = relationship("Role")
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("employees.id"), nullable=True)
    employee = relationship("Employee")
    is_active = Column(Boolean, nullable=False, default=True)
