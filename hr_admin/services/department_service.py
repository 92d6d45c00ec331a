import logging
import math
from contextlib import contextmanager
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hr_admin.config import settings
from hr_admin.errors import not_found, repository_error, unauthorized, validation_error
from hr_admin.models.department import Department
from hr_admin.models.role import ADMIN, HR, MANAGER
from hr_admin.repositories.department_repository import SORT_COLUMNS, DepartmentRepository
from hr_admin.schemas.department import (
    ChildSummary,
    DepartmentCreate,
    DepartmentDetail,
    DepartmentFilter,
    DepartmentHierarchy,
    DepartmentInfo,
    DepartmentListItem,
    DepartmentOption,
    DepartmentPage,
    DepartmentResponse,
    DepartmentUpdate,
    EmployeeSummary,
    HierarchyChild,
    Pagination,
    PositionSummary,
)
from hr_admin.services.hierarchy import HierarchyValidator

logger = logging.getLogger(__name__)

READ_ROLES = (ADMIN, HR, MANAGER)
WRITE_ROLES = (ADMIN, HR)

DEFAULT_SORT_BY = "name"
DEFAULT_SORT_ORDER = "asc"

NAME_INDEX = "uq_departments_name_lower"

NAME_EXISTS = "Department name already exists"
DEPARTMENT_NOT_FOUND = "Department not found"
MANAGER_INVALID = "Manager not found or not active"
PARENT_INVALID = "Parent department not found or not active"
CIRCULAR_PARENT = "Cannot create circular parent-child relationship"
ALREADY_INACTIVE = "Department is already inactive"


class DepartmentService:
    """
    Fachlogik für Departments: Anlegen, Bearbeiten, Soft Delete und Lesen.

    Jede schreibende Operation läuft in genau einer Transaktion des
    Repositories. Fachliche Fehler werden als ServiceError geworfen,
    Datenbankfehler geloggt und als REPOSITORY-Fehler weitergereicht.
    """

    def __init__(self, repository: DepartmentRepository, hierarchy: Optional[HierarchyValidator] = None):
        self.repository = repository
        self.hierarchy = hierarchy or HierarchyValidator(repository)

    # ============ HILFSFUNKTIONEN ============

    def _authorize(self, caller_role: Optional[str], allowed_roles: tuple) -> None:
        if caller_role not in allowed_roles:
            raise unauthorized()

    @contextmanager
    def _repository_errors(self, operation: str):
        try:
            yield
        except IntegrityError as exc:
            # Eindeutiger Index auf lower(name) greift, wenn zwei Anfragen gleichzeitig anlegen
            if NAME_INDEX in str(exc.orig):
                logger.warning(f"Namenskonflikt beim Schreiben ({operation})")
                raise validation_error(NAME_EXISTS) from exc
            logger.exception(f"Datenbankfehler in {operation}")
            raise repository_error(f"Failed to {operation}") from exc
        except SQLAlchemyError as exc:
            logger.exception(f"Datenbankfehler in {operation}")
            raise repository_error(f"Failed to {operation}") from exc

    def _ensure_unique_name(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        if self.repository.find_by_name_case_insensitive(name, exclude_id=exclude_id):
            raise validation_error(NAME_EXISTS)

    def _ensure_active_manager(self, manager_id: UUID) -> None:
        if not self.repository.find_active_employee(manager_id):
            raise validation_error(MANAGER_INVALID)

    def _ensure_active_parent(self, parent_id: UUID) -> None:
        if not self.repository.find_active_by_id(parent_id):
            raise validation_error(PARENT_INVALID)

    def _get_or_404(self, department_id: UUID, expand: bool = False) -> Department:
        department = self.repository.find_by_id(department_id, expand=expand)
        if not department:
            raise not_found(DEPARTMENT_NOT_FOUND)
        return department

    # ============ LESEN ============

    def list_departments(
        self,
        filters: Optional[DepartmentFilter] = None,
        page: int = 1,
        limit: Optional[int] = None,
        sort_by: str = DEFAULT_SORT_BY,
        sort_order: str = DEFAULT_SORT_ORDER,
        caller_role: Optional[str] = None,
    ) -> DepartmentPage:
        self._authorize(caller_role, READ_ROLES)

        filters = filters or DepartmentFilter()
        if page < 1:
            raise validation_error("Page must be at least 1")
        if limit is None:
            limit = settings.default_page_size
        limit = min(max(limit, 1), settings.max_page_size)

        # Unbekannte Sortierung fällt auf Name/aufsteigend zurück
        if sort_by not in SORT_COLUMNS:
            sort_by = DEFAULT_SORT_BY
        sort_order = (sort_order or "").lower()
        if sort_order not in ("asc", "desc"):
            sort_order = DEFAULT_SORT_ORDER

        with self._repository_errors("fetch departments"):
            departments = self.repository.find_many(
                filters,
                sort_by=sort_by,
                descending=sort_order == "desc",
                skip=(page - 1) * limit,
                take=limit,
            )
            total = self.repository.count(filters)
            ids = [d.id for d in departments]
            employee_counts = self.repository.count_active_employees_by_department(ids)
            child_counts = self.repository.count_active_children_by_department(ids)

            items = [
                DepartmentListItem(
                    **DepartmentResponse.model_validate(d).model_dump(),
                    active_employee_count=employee_counts.get(d.id, 0),
                    active_child_count=child_counts.get(d.id, 0),
                )
                for d in departments
            ]

        pages = math.ceil(total / limit)
        return DepartmentPage(
            items=items,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=pages,
                has_next=page < pages,
                has_prev=page > 1,
            ),
        )

    def get_department(self, department_id: UUID, caller_role: Optional[str]) -> DepartmentDetail:
        """Department mit Manager, Parent und den aktiven Children, Mitarbeitern und Positionen."""
        self._authorize(caller_role, READ_ROLES)

        with self._repository_errors("fetch department"):
            department = self._get_or_404(department_id, expand=True)

            children = self.repository.find_active_children(department_id)
            child_counts = self.repository.count_active_employees_by_department([c.id for c in children])
            employees = self.repository.find_active_employees(department_id)
            positions = self.repository.find_active_positions(department_id)
            position_counts = self.repository.count_active_employees_by_position([p.id for p in positions])

            return DepartmentDetail(
                **DepartmentResponse.model_validate(department).model_dump(),
                children=[
                    ChildSummary(id=c.id, name=c.name, is_active=c.is_active, employee_count=child_counts.get(c.id, 0))
                    for c in children
                ],
                employees=[EmployeeSummary.model_validate(e) for e in employees],
                positions=[
                    PositionSummary(id=p.id, title=p.title, is_active=p.is_active, employee_count=position_counts.get(p.id, 0))
                    for p in positions
                ],
            )

    def get_hierarchy(self, department_id: UUID, caller_role: Optional[str]) -> DepartmentHierarchy:
        """
        Pfad zur Wurzel plus zwei Ebenen aktiver Unterbereiche.
        Tiefere Ebenen brauchen einen weiteren Aufruf für das jeweilige Child.
        """
        self._authorize(caller_role, READ_ROLES)

        with self._repository_errors("fetch department hierarchy"):
            department = self._get_or_404(department_id, expand=True)

            children = []
            for child in self.repository.find_active_children(department_id):
                grandchildren = self.repository.find_active_children(child.id)
                children.append(HierarchyChild(
                    id=child.id,
                    name=child.name,
                    children=[DepartmentInfo(id=g.id, name=g.name) for g in grandchildren],
                ))

            return DepartmentHierarchy(
                department=DepartmentResponse.model_validate(department),
                ancestor_path=self.hierarchy.resolve_ancestor_path(department_id),
                children=children,
            )

    def list_active_for_selection(self, caller_role: Optional[str]) -> list[DepartmentOption]:
        # Für Auswahlfelder im Frontend
        self._authorize(caller_role, READ_ROLES)

        with self._repository_errors("fetch active departments"):
            return [DepartmentOption.model_validate(d) for d in self.repository.find_active_for_selection()]

    def find_snapshot(self, department_id: UUID, caller_role: Optional[str]) -> Optional[DepartmentResponse]:
        """Zustand vor einer Änderung, für das Audit-Log. Nur für schreibende Rollen."""
        self._authorize(caller_role, WRITE_ROLES)

        with self._repository_errors("fetch department"):
            department = self.repository.find_by_id(department_id, expand=True)
            return DepartmentResponse.model_validate(department) if department else None

    # ============ SCHREIBEN ============

    def create_department(self, data: DepartmentCreate, caller_role: Optional[str]) -> Department:
        self._authorize(caller_role, WRITE_ROLES)

        with self._repository_errors("create department"):
            with self.repository.transaction():
                self._ensure_unique_name(data.name)
                if data.manager_id:
                    self._ensure_active_manager(data.manager_id)
                if data.parent_id:
                    self._ensure_active_parent(data.parent_id)

                department = self.repository.create(
                    name=data.name,
                    description=data.description,
                    manager_id=data.manager_id,
                    parent_id=data.parent_id,
                    is_active=data.is_active,
                )
                department_id = department.id

            created = self.repository.find_by_id(department_id, expand=True)

        logger.info(f"Department '{created.name}' ({created.id}) angelegt")
        return created

    def update_department(self, department_id: UUID, data: DepartmentUpdate, caller_role: Optional[str]) -> Department:
        """
        Partielles Update. Nicht gesendete Felder bleiben unverändert;
        ein explizites parent_id=None macht den Bereich zur Wurzel.
        """
        self._authorize(caller_role, WRITE_ROLES)
        changes = data.model_dump(exclude_unset=True)

        with self._repository_errors("update department"):
            with self.repository.transaction():
                department = self._get_or_404(department_id)

                if "name" in changes and changes["name"] != department.name:
                    self._ensure_unique_name(changes["name"], exclude_id=department_id)

                if changes.get("manager_id"):
                    self._ensure_active_manager(changes["manager_id"])

                new_parent_id = changes.get("parent_id")
                if new_parent_id is not None:
                    self._ensure_active_parent(new_parent_id)
                    if self.hierarchy.detect_cycle(department_id, new_parent_id):
                        raise validation_error(CIRCULAR_PARENT)

                if changes:
                    self.repository.update(department_id, changes)

                # Nach dem flush nochmal prüfen, falls die Kette sich inzwischen geändert hat
                if new_parent_id is not None and self.hierarchy.detect_cycle(department_id, new_parent_id):
                    logger.warning(f"Zyklus für {department_id} erst nach dem Schreiben erkannt, Rollback")
                    raise validation_error(CIRCULAR_PARENT)

            updated = self.repository.find_by_id(department_id, expand=True)

        logger.info(f"Department {department_id} aktualisiert: {sorted(changes)}")
        return updated

    def delete_department(self, department_id: UUID, caller_role: Optional[str]) -> Department:
        """
        Soft Delete. Blockiert, solange aktive Mitarbeiter, Unterbereiche oder
        Positionen am Department hängen; gemeldet wird die erste betroffene Kategorie.
        """
        self._authorize(caller_role, WRITE_ROLES)

        with self._repository_errors("delete department"):
            with self.repository.transaction():
                department = self._get_or_404(department_id)
                if not department.is_active:
                    raise validation_error(ALREADY_INACTIVE)

                employee_count = self.repository.count_active_employees(department_id)
                if employee_count:
                    raise validation_error(
                        f"Cannot delete department with {employee_count} active employee(s). "
                        "Please reassign employees first."
                    )
                child_count = self.repository.count_active_children(department_id)
                if child_count:
                    raise validation_error(
                        f"Cannot delete department with {child_count} active child department(s). "
                        "Please reassign or delete child departments first."
                    )
                position_count = self.repository.count_active_positions(department_id)
                if position_count:
                    raise validation_error(
                        f"Cannot delete department with {position_count} active position(s). "
                        "Please reassign or delete positions first."
                    )

                # Manager entfernen, sonst hängt er an einem inaktiven Bereich
                self.repository.update(department_id, {"is_active": False, "manager_id": None})

            deleted = self.repository.find_by_id(department_id, expand=True)

        logger.info(f"Department {department_id} deaktiviert")
        return deleted
