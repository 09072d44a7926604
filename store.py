import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from config import DEFAULT_STATUS
from database import close_engine
from errors import StorageFault, TaskNotFound
from models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    CRUD over the tasks table.

    Holds no state besides the engine it was built with. Each operation runs
    in its own session and commits before returning. Field values are stored
    as given: validating them is the caller's job.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def close(self) -> None:
        close_engine(self.engine)

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
            except SQLAlchemyError as exc:
                session.rollback()
                raise StorageFault(f"Error {action}: {exc}") from exc

    def list_all(self) -> List[Task]:
        """All tasks, newest first"""
        query = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
        with self._session("retrieving tasks") as session:
            return list(session.exec(query).all())

    def get_by_id(self, task_id: int) -> Task:
        with self._session("retrieving task") as session:
            task = session.get(Task, task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def create(self, title: str, description: Optional[str] = None, status: Optional[str] = None) -> int:
        """Insert a task and return its new id"""
        task = Task(
            title=title,
            description=description,
            status=status or DEFAULT_STATUS,
        )
        with self._session("creating task") as session:
            session.add(task)
            session.commit()
            session.refresh(task)
        logger.debug("Created task id=%s", task.id)
        return task.id

    def update(self, task_id: int, title: str, description: Optional[str], status: str) -> int:
        """Overwrite the mutable fields; returns the number of rows changed"""
        with self._session("updating task") as session:
            task = session.get(Task, task_id)
            if task is None:
                return 0

            task.title = title
            task.description = description
            task.status = status

            session.add(task)
            session.commit()
        logger.debug("Updated task id=%s", task_id)
        return 1

    def delete(self, task_id: int) -> int:
        """Remove a task; returns the number of rows changed"""
        with self._session("deleting task") as session:
            task = session.get(Task, task_id)
            if task is None:
                return 0

            session.delete(task)
            session.commit()
        logger.debug("Deleted task id=%s", task_id)
        return 1
