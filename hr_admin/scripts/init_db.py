import os
import sys
import traceback

from hr_admin.database import Base, SessionLocal, engine
from hr_admin.models import Role, User
from hr_admin.models.role import ADMIN, ALL_ROLES
from hr_admin.utils.logging_config import setup_logging
from hr_admin.utils.security import hash_password

logger = setup_logging()


def main() -> int:
    """
    Legt die Tabellen an und befüllt die Rollen.
    Ist INIT_ADMIN_EMAIL/INIT_ADMIN_PASSWORD gesetzt, wird zusätzlich ein Admin angelegt.
    Gibt Exit-Code zurück: 0 = Erfolg, 1 = Fehler
    """
    logger.info("Datenbank-Initialisierung gestartet")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = {role.name for role in db.query(Role).all()}
        for name in ALL_ROLES:
            if name not in existing:
                db.add(Role(name=name))
                logger.info(f"Rolle {name} angelegt")
        db.flush()

        admin_email = os.environ.get("INIT_ADMIN_EMAIL")
        admin_password = os.environ.get("INIT_ADMIN_PASSWORD")
        if admin_email and admin_password:
            if not db.query(User).filter(User.email == admin_email).first():
                admin_role = db.query(Role).filter(Role.name == ADMIN).first()
                db.add(User(
                    name="Administrator",
                    email=admin_email,
                    password_hash=hash_password(admin_password),
                    role_id=admin_role.id,
                    is_active=True
                ))
                logger.info(f"Admin {admin_email} angelegt")

        db.commit()
        return 0

    except Exception as e:
        db.rollback()
        logger.error(f"Initialisierung fehlgeschlagen: {e}")
        logger.error(traceback.format_exc())
        return 1
    finally:
        db.close()
        logger.info("Datenbank-Initialisierung beendet")


if __name__ == "__main__":
    sys.exit(main())
