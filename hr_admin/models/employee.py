from sqlalchemy import Column, Date, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship
import enum
import uuid

from hr_admin.database import Base


class EmploymentStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    ON_LEAVE = "ON_LEAVE"
    INACTIVE = "INACTIVE"
    TERMINATED = "TERMINATED"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_number = Column(String(50), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    employment_status = Column(Enum(EmploymentStatus), nullable=False, default=EmploymentStatus.ACTIVE)
    hire_date = Column(Date, nullable=True)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id"), nullable=True)
    position_id = Column(Uuid(as_uuid=True), ForeignKey("positions.id"), nullable=True)

    department = relationship("Department", foreign_keys=[department_id], back_populates="employees")
    position = relationship("Position", back_populates="employees")
