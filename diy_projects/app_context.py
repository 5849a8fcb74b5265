# diyProjects application context
# Rev 0.1.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from .models.dao import ProjectDao
from .repositories.db import Database
from .services.project_service import ProjectService
from .utils.logging_setup import get_logger


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db_path: Path
    db: Database
    dao: ProjectDao
    project_service: ProjectService

    @classmethod
    def create(cls, db_path: Path, *, migrate: bool = True) -> "AppContext":
        """Initialize DB (applying pending migrations), DAO, and service."""
        log = get_logger("AppContext")
        db = Database(db_path)
        if migrate:
            db.run_migrations()
        dao = ProjectDao(db)
        service = ProjectService(dao)
        log.info("AppContext initialized with DB=%s", db.path)
        return cls(db_path=db.path, db=db, dao=dao, project_service=service)
