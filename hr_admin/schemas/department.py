from pydantic import BaseModel, field_validator
from uuid import UUID
from typing import Optional
from datetime import date, datetime

from hr_admin.models.employee import EmploymentStatus

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _clean_name(value: Optional[str]) -> str:
    if value is None:
        raise ValueError("Name is required")
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    if len(value) > NAME_MAX_LENGTH:
        raise ValueError(f"Name must be less than {NAME_MAX_LENGTH} characters")
    return value


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")
    # Leerer Text wird als "keine Beschreibung" gespeichert
    return value or None


class DepartmentInfo(BaseModel):
    id: UUID
    name: str
    model_config = {"from_attributes": True}

class PositionInfo(BaseModel):
    title: str
    model_config = {"from_attributes": True}

class ManagerInfo(BaseModel):
    id: UUID
    employee_number: str
    first_name: str
    last_name: str
    email: str
    position: Optional[PositionInfo] = None
    model_config = {"from_attributes": True}


class DepartmentCreate(BaseModel):
    name: str
    description: Optional[str] = None
    manager_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _clean_name(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value):
        return _clean_description(value)


class DepartmentUpdate(BaseModel):
    """
    Partielles Update: nur gesetzte Felder werden übernommen
    (model_dump(exclude_unset=True)). parent_id=None macht den Bereich zur Wurzel.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    manager_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value):
        return _clean_name(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value):
        return _clean_description(value)


class DepartmentFilter(BaseModel):
    is_active: Optional[bool] = None
    parent_id: Optional[UUID] = None
    search: Optional[str] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def blank_parent_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("search")
    @classmethod
    def blank_search_to_none(cls, value):
        if value is None:
            return None
        return value.strip() or None


class DepartmentResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    is_active: bool
    manager_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    manager: Optional[ManagerInfo] = None
    parent: Optional[DepartmentInfo] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DepartmentListItem(DepartmentResponse):
    active_employee_count: int = 0
    active_child_count: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class DepartmentPage(BaseModel):
    items: list[DepartmentListItem]
    pagination: Pagination


class ChildSummary(BaseModel):
    id: UUID
    name: str
    is_active: bool
    employee_count: int = 0


class EmployeeSummary(BaseModel):
    id: UUID
    employee_number: str
    first_name: str
    last_name: str
    email: str
    employment_status: EmploymentStatus
    position: Optional[PositionInfo] = None
    hire_date: Optional[date] = None

    model_config = {"from_attributes": True}


class PositionSummary(BaseModel):
    id: UUID
    title: str
    is_active: bool
    employee_count: int = 0


class DepartmentDetail(DepartmentResponse):
    children: list[ChildSummary] = []
    employees: list[EmployeeSummary] = []
    positions: list[PositionSummary] = []


class HierarchyChild(BaseModel):
    id: UUID
    name: str
    children: list[DepartmentInfo] = []


class DepartmentHierarchy(BaseModel):
    department: DepartmentResponse
    ancestor_path: list[DepartmentInfo]
    children: list[HierarchyChild]


class DepartmentOption(BaseModel):
    id: UUID
    name: str
    parent_id: Optional[UUID] = None
    parent: Optional[DepartmentInfo] = None

    model_config = {"from_attributes": True}
