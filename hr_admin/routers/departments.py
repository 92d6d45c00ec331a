from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Optional

from hr_admin.config import settings
from hr_admin.database import get_db
from hr_admin.models.audit_log import AuditAction
from hr_admin.models.user import User
from hr_admin.repositories.department_repository import DepartmentRepository
from hr_admin.schemas.common import ApiResponse
from hr_admin.schemas.department import (
    DepartmentCreate,
    DepartmentDetail,
    DepartmentFilter,
    DepartmentHierarchy,
    DepartmentOption,
    DepartmentPage,
    DepartmentResponse,
    DepartmentUpdate,
)
from hr_admin.services.audit_service import log_audit
from hr_admin.services.department_service import DepartmentService
from hr_admin.utils.security import get_current_user

router = APIRouter(prefix="/departments", tags=["departments"])

ENTITY_TYPE = "department"


def get_department_service(db: Session = Depends(get_db)) -> DepartmentService:
    return DepartmentService(DepartmentRepository(db))


def _snapshot(department) -> dict:
    return DepartmentResponse.model_validate(department).model_dump(mode="json")


@router.get("/", response_model=ApiResponse[DepartmentPage])
def list_departments(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size),
    is_active: Optional[bool] = None,
    parent_id: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    filters = DepartmentFilter(is_active=is_active, parent_id=parent_id, search=search)
    result = service.list_departments(
        filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order,
        caller_role=current_user.role.name
    )
    log_audit(db, current_user.id, AuditAction.READ, ENTITY_TYPE, request=request)
    return ApiResponse(message="Departments fetched successfully", data=result)


# Muss vor /{id} stehen, sonst wird "active" als ID gelesen
@router.get("/active", response_model=ApiResponse[list[DepartmentOption]])
def list_active_departments(
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    result = service.list_active_for_selection(current_user.role.name)
    log_audit(db, current_user.id, AuditAction.READ, ENTITY_TYPE, request=request)
    return ApiResponse(message="Active departments fetched successfully", data=result)


@router.get("/{id}", response_model=ApiResponse[DepartmentDetail])
def get_department(
    id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    result = service.get_department(id, current_user.role.name)
    log_audit(db, current_user.id, AuditAction.READ, ENTITY_TYPE, id, request=request)
    return ApiResponse(message="Department details fetched successfully", data=result)


@router.get("/{id}/hierarchy", response_model=ApiResponse[DepartmentHierarchy])
def get_department_hierarchy(
    id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    result = service.get_hierarchy(id, current_user.role.name)
    log_audit(db, current_user.id, AuditAction.READ, ENTITY_TYPE, id, request=request)
    return ApiResponse(message="Department hierarchy fetched successfully", data=result)


@router.post("/", response_model=ApiResponse[DepartmentResponse], status_code=201)
def create_department(
    department: DepartmentCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    created = service.create_department(department, current_user.role.name)
    new_value = _snapshot(created)
    log_audit(db, current_user.id, AuditAction.CREATE, ENTITY_TYPE, created.id, new_value=new_value, request=request)
    return ApiResponse(message="Department created successfully", data=new_value)


@router.put("/{id}", response_model=ApiResponse[DepartmentResponse])
@router.patch("/{id}", response_model=ApiResponse[DepartmentResponse])
def update_department(
    id: UUID,
    department_update: DepartmentUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    before = service.find_snapshot(id, current_user.role.name)
    updated = service.update_department(id, department_update, current_user.role.name)
    new_value = _snapshot(updated)
    log_audit(
        db, current_user.id, AuditAction.UPDATE, ENTITY_TYPE, id,
        old_value=before.model_dump(mode="json") if before else None,
        new_value=new_value,
        request=request
    )
    return ApiResponse(message="Department updated successfully", data=new_value)


@router.delete("/{id}", response_model=ApiResponse[DepartmentResponse])
def delete_department(
    id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: DepartmentService = Depends(get_department_service),
    db: Session = Depends(get_db)
):
    before = service.find_snapshot(id, current_user.role.name)
    deleted = service.delete_department(id, current_user.role.name)
    new_value = _snapshot(deleted)
    log_audit(
        db, current_user.id, AuditAction.DELETE, ENTITY_TYPE, id,
        old_value=before.model_dump(mode="json") if before else None,
        new_value=new_value,
        request=request
    )
    return ApiResponse(message="Department deleted successfully", data=new_value)
