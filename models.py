from sqlmodel import SQLModel, Field
from sqlalchemy import func
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(SQLModel, table=True):
    """Task record: the only table the service owns"""
    __tablename__ = "tasks"
    # AUTOINCREMENT keeps SQLite from handing out a deleted id again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = Field(default="")
    status: str = Field(
        default="pending",
        sa_column_kwargs={"server_default": "pending"},
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"server_default": func.now()},
    )
