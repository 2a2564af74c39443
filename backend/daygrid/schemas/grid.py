"""
Daygrid Backend - Task and Grid Schemas
=========================================

What:  Request/response bodies for the task list and the daily photo grid.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class TaskCreateRequest(BaseModel):
    title: str = Field(max_length=1000, description="Task label; trimmed before saving")


class TaskReplaceRequest(BaseModel):
    tasks: List[str] = Field(description="Complete, ordered task list")


class TaskListResponse(BaseModel):
    tasks: List[str]
    max_tasks: int = Field(description="Upper bound on the number of tasks")
    rows: Optional[int] = Field(default=None, description="Grid rows for this task count")
    cols: Optional[int] = Field(default=None, description="Grid columns for this task count")


class GridCell(BaseModel):
    index: int
    task: str
    image: Optional[str] = Field(default=None, description="Photo URL, null when empty")


class GridResponse(BaseModel):
    """
    The signed-in user's grid for today.

    `rows`/`cols` are null when the task count has no layout; the client
    then shows only the task list.
    """
    rows: Optional[int] = None
    cols: Optional[int] = None
    cells: List[GridCell]
    filled: int = Field(description="Number of cells holding a photo")
    is_complete: bool = Field(description="Layout exists and every cell has a photo")
