from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Index, Text, Uuid, func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from hr_admin.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Department(Base):
    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id"), nullable=True)
    # use_alter, weil employees wiederum auf departments zeigt
    manager_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", use_alter=True, name="fk_departments_manager_id"),
        nullable=True,
    )
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    parent = relationship("Department", remote_side=[id], back_populates="children")
    children = relationship("Department", back_populates="parent")
    manager = relationship("Employee", foreign_keys=[manager_id])
    employees = relationship("Employee", foreign_keys="Employee.department_id", back_populates="department")
    positions = relationship("Position", back_populates="department")

    __table_args__ = (
        Index("uq_departments_name_lower", func.lower(name), unique=True),
    )
