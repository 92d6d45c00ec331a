from contextlib import contextmanager
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from hr_admin.models import Department, Employee, EmploymentStatus, Position
from hr_admin.schemas.department import DepartmentFilter

SORT_COLUMNS = {
    "name": Department.name,
    "created_at": Department.created_at,
    "updated_at": Department.updated_at,
}


class DepartmentRepository:
    """
    Datenbankzugriff für Departments und ihre abhängigen Datensätze.

    Schreibende Methoden machen nur flush(); committet wird ausschließlich
    über transaction(), damit ein Service-Aufruf eine einzige Transaktion bildet.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ============ EINZELNE DEPARTMENTS ============

    def find_by_id(self, department_id: UUID, expand: bool = False) -> Optional[Department]:
        query = self.db.query(Department)
        if expand:
            query = query.options(
                joinedload(Department.manager).joinedload(Employee.position),
                joinedload(Department.parent),
            )
        return query.filter(Department.id == department_id).first()

    def find_active_by_id(self, department_id: UUID) -> Optional[Department]:
        return self.db.query(Department).filter(
            Department.id == department_id,
            Department.is_active == True
        ).first()

    def find_by_name_case_insensitive(self, name: str, exclude_id: Optional[UUID] = None) -> Optional[Department]:
        # Inaktive Bereiche zählen mit, Namen werden nie wieder frei
        query = self.db.query(Department).filter(func.lower(Department.name) == name.lower())
        if exclude_id:
            query = query.filter(Department.id != exclude_id)
        return query.first()

    def find_active_employee(self, employee_id: UUID) -> Optional[Employee]:
        return self.db.query(Employee).filter(
            Employee.id == employee_id,
            Employee.employment_status == EmploymentStatus.ACTIVE
        ).first()

    # ============ LISTEN ============

    def _filtered(self, filters: DepartmentFilter):
        query = self.db.query(Department)
        if filters.is_active is not None:
            query = query.filter(Department.is_active == filters.is_active)
        if filters.parent_id:
            query = query.filter(Department.parent_id == filters.parent_id)
        if filters.search:
            # % und _ im Suchtext sind Zeichen, keine Platzhalter
            query = query.filter(or_(
                Department.name.icontains(filters.search, autoescape=True),
                Department.description.icontains(filters.search, autoescape=True)
            ))
        return query

    def find_many(self, filters: DepartmentFilter, sort_by: str, descending: bool, skip: int, take: int) -> list[Department]:
        column = SORT_COLUMNS[sort_by]
        order = column.desc() if descending else column.asc()
        return self._filtered(filters).options(
            joinedload(Department.manager).joinedload(Employee.position),
            joinedload(Department.parent)
        ).order_by(order, Department.id).offset(skip).limit(take).all()

    def count(self, filters: DepartmentFilter) -> int:
        return self._filtered(filters).count()

    def find_active_for_selection(self) -> list[Department]:
        return self.db.query(Department).options(
            joinedload(Department.parent)
        ).filter(Department.is_active == True).order_by(Department.name).all()

    def find_active_children(self, department_id: UUID) -> list[Department]:
        return self.db.query(Department).filter(
            Department.parent_id == department_id,
            Department.is_active == True
        ).order_by(Department.name).all()

    def find_active_employees(self, department_id: UUID) -> list[Employee]:
        return self.db.query(Employee).options(
            joinedload(Employee.position)
        ).filter(
            Employee.department_id == department_id,
            Employee.employment_status == EmploymentStatus.ACTIVE
        ).order_by(Employee.first_name).all()

    def find_active_positions(self, department_id: UUID) -> list[Position]:
        return self.db.query(Position).filter(
            Position.department_id == department_id,
            Position.is_active == True
        ).order_by(Position.title).all()

    # ============ SCHREIBEN ============

    def create(self, **fields) -> Department:
        department = Department(**fields)
        self.db.add(department)
        self.db.flush()
        return department

    def update(self, department_id: UUID, fields: dict) -> Department:
        department = self.db.get(Department, department_id)
        for field, value in fields.items():
            setattr(department, field, value)
        self.db.flush()
        return department

    # ============ ABHÄNGIGKEITEN ZÄHLEN ============

    def count_active_employees(self, department_id: UUID) -> int:
        return self.db.query(Employee).filter(
            Employee.department_id == department_id,
            Employee.employment_status == EmploymentStatus.ACTIVE
        ).count()

    def count_active_children(self, department_id: UUID) -> int:
        return self.db.query(Department).filter(
            Department.parent_id == department_id,
            Department.is_active == True
        ).count()

    def count_active_positions(self, department_id: UUID) -> int:
        return self.db.query(Position).filter(
            Position.department_id == department_id,
            Position.is_active == True
        ).count()

    # Gruppierte Zählungen für Listenansichten (eine Abfrage statt eine pro Zeile)

    def count_active_employees_by_department(self, department_ids: list[UUID]) -> dict[UUID, int]:
        if not department_ids:
            return {}
        rows = self.db.query(Employee.department_id, func.count(Employee.id)).filter(
            Employee.department_id.in_(department_ids),
            Employee.employment_status == EmploymentStatus.ACTIVE
        ).group_by(Employee.department_id).all()
        return dict(rows)

    def count_active_children_by_department(self, department_ids: list[UUID]) -> dict[UUID, int]:
        if not department_ids:
            return {}
        rows = self.db.query(Department.parent_id, func.count(Department.id)).filter(
            Department.parent_id.in_(department_ids),
            Department.is_active == True
        ).group_by(Department.parent_id).all()
        return dict(rows)

    def count_active_employees_by_position(self, position_ids: list[UUID]) -> dict[UUID, int]:
        if not position_ids:
            return {}
        rows = self.db.query(Employee.position_id, func.count(Employee.id)).filter(
            Employee.position_id.in_(position_ids),
            Employee.employment_status == EmploymentStatus.ACTIVE
        ).group_by(Employee.position_id).all()
        return dict(rows)
