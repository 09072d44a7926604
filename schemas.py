from pydantic import BaseModel, Field, field_validator
from typing import Optional, Any, List
from datetime import datetime

import config


def _check_status(value: Optional[str]) -> Optional[str]:
    # blank form fields mean "not given"
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value not in config.TASK_STATUSES:
        allowed = ", ".join(config.TASK_STATUSES)
        raise ValueError(f"status must be one of: {allowed}")
    return value


class TaskCreate(BaseModel):
    """Schema for creating a new task"""
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field("", max_length=1000)
    status: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: Optional[str]) -> str:
        return value.strip() if value else ""

    @field_validator("status")
    @classmethod
    def known_status(cls, value: Optional[str]) -> Optional[str]:
        return _check_status(value)


class TaskUpdate(TaskCreate):
    """
    Schema for updating a task

    All three mutable fields are overwritten; a missing status falls back
    to config.default_status() in the handler.
    """


class TaskResponse(BaseModel):
    """Schema for task response"""
    id: int
    title: str
    description: Optional[str]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class TaskForm(BaseModel):
    """Rendering context for the new/edit forms"""
    task: dict
    statuses: List[str]


class ApiResponse(BaseModel):
    """Standard API response wrapper"""
    success: bool
    data: Optional[Any] = None
    error: Optional[dict] = None
