from fastapi import HTTPException, status


class ValidationFailed(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class TaskNotFound(HTTPException):
    def __init__(self, detail: str = "Task not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
