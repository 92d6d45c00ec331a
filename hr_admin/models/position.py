from sqlalchemy import Column, String, ForeignKey, Boolean, Uuid
from sqlalchemy.orm import relationship
import uuid

from hr_admin.database import Base


class Position(Base):
    __tablename__ = "positions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id"), nullable=True)

    department = relationship("Department", back_populates="positions")
    employees = relationship("Employee", back_populates="position")
