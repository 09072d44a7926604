from typing import Optional


class TaskError(Exception):
    """Base class for task service errors"""
    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskNotFound(TaskError):
    """No row matches the requested task id"""
    code = "not_found"
    status_code = 404

    def __init__(self, task_id: Optional[int] = None):
        super().__init__("Task not found")
        self.task_id = task_id


class StorageFault(TaskError):
    """The persistence layer failed (I/O, constraint, connectivity)"""
    code = "storage_fault"
    status_code = 500


class ValidationError(TaskError):
    """Client input was rejected before reaching the store"""
    code = "validation_error"
    status_code = 400
