import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from hr_admin.config import settings
from hr_admin.schemas.department import DepartmentInfo

logger = logging.getLogger(__name__)


class HierarchyValidator:
    """
    Prüfungen auf der Parent-Kette der Departments.

    Beide Läufe sind in der Tiefe begrenzt (Settings.hierarchy_max_cycle_depth /
    hierarchy_max_path_depth). Die Grenze schützt vor kaputten Daten, sie ist
    keine Garantie für beliebig tiefe, gültige Hierarchien.

    Das Repository muss nur find_by_id(id) liefern; das Ergebnis braucht
    die Attribute id, name und parent_id.
    """

    def __init__(self, repository, max_cycle_depth: Optional[int] = None, max_path_depth: Optional[int] = None):
        self.repository = repository
        self.max_cycle_depth = max_cycle_depth if max_cycle_depth is not None else settings.hierarchy_max_cycle_depth
        self.max_path_depth = max_path_depth if max_path_depth is not None else settings.hierarchy_max_path_depth

    def detect_cycle(self, department_id: UUID, proposed_parent_id: UUID) -> bool:
        """
        True, wenn proposed_parent_id als Parent von department_id einen Zyklus erzeugt.

        Fehlende Knoten oder Datenbankfehler während des Laufs beenden die Suche
        mit False: lieber eine Änderung durchlassen als wegen Datenlücken blockieren.
        """
        if department_id == proposed_parent_id:
            return True

        visited = {department_id}
        current_id = proposed_parent_id
        depth = 0

        while current_id is not None:
            if depth >= self.max_cycle_depth:
                logger.warning(
                    f"Zyklusprüfung für {department_id} nach {depth} Ebenen abgebrochen (Limit erreicht)"
                )
                return False
            if current_id in visited:
                return True
            visited.add(current_id)

            try:
                node = self.repository.find_by_id(current_id)
            except SQLAlchemyError:
                logger.exception(f"Fehler bei der Zyklusprüfung für {department_id}")
                return False
            if node is None:
                logger.warning(f"Zyklusprüfung: Department {current_id} fehlt in der Parent-Kette")
                return False

            current_id = node.parent_id
            depth += 1

        return False

    def resolve_ancestor_path(self, department_id: UUID) -> list[DepartmentInfo]:
        """Pfad von der Wurzel bis zum Department selbst (inklusive)."""
        path: list[DepartmentInfo] = []
        current = self.repository.find_by_id(department_id)

        while current is not None and len(path) < self.max_path_depth:
            path.insert(0, DepartmentInfo(id=current.id, name=current.name))
            if current.parent_id is None:
                return path
            current = self.repository.find_by_id(current.parent_id)

        if current is not None:
            logger.warning(f"Pfad für {department_id} nach {len(path)} Ebenen abgeschnitten")
        return path
