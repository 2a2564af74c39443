"""
Daygrid Backend - Grid Layout Rules
=====================================

What:  Pure functions mapping a task count to a grid shape and keeping the
       image slot list aligned with the task list.
Who:   Used by TaskService, GridService and the grid schemas.

Grid Configurations:
    tasks │ rows × cols
    ──────┼────────────
      1   │  1 × 1
      2   │  1 × 2
      3   │  1 × 3
      4   │  2 × 2
      5   │  5 × 1
      6   │  3 × 2
      9   │  3 × 3

    Any other count (0, 7, 8) has no layout: the grid cannot be shown or
    published until tasks are added or removed.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence


@dataclass(frozen=True)
class GridConfiguration:
    task_count: int
    rows: int
    cols: int


GRID_CONFIGURATIONS: Dict[int, GridConfiguration] = {
    config.task_count: config
    for config in (
        GridConfiguration(task_count=1, rows=1, cols=1),
        GridConfiguration(task_count=2, rows=1, cols=2),
        GridConfiguration(task_count=3, rows=1, cols=3),
        GridConfiguration(task_count=4, rows=2, cols=2),
        GridConfiguration(task_count=5, rows=5, cols=1),
        GridConfiguration(task_count=6, rows=3, cols=2),
        GridConfiguration(task_count=9, rows=3, cols=3),
    )
}


def grid_for_task_count(task_count: int) -> Optional[GridConfiguration]:
    """Return the layout for `task_count` tasks, or None when there is none."""
    return GRID_CONFIGURATIONS.get(task_count)


def align_images(images: Optional[Sequence[Optional[str]]], count: int) -> List[Optional[str]]:
    """
    Return exactly `count` image slots.

    Extra slots are dropped from the end; missing ones are padded with None.
    """
    aligned: List[Optional[str]] = list(images or [])[:count]
    aligned.extend([None] * (count - len(aligned)))
    return aligned


def remove_slot(images: Optional[Sequence[Optional[str]]], index: int) -> List[Optional[str]]:
    """
    Drop the slot at `index`, shifting later photos down with their tasks.

    Indexes past the end of a short slot list leave it unchanged.
    """
    remaining = list(images or [])
    if 0 <= index < len(remaining):
        del remaining[index]
    return remaining


def filled_count(images: Sequence[Optional[str]]) -> int:
    return sum(1 for image in images if image)


def is_complete(task_count: int, images: Sequence[Optional[str]]) -> bool:
    """A grid is complete when it has a layout and every cell holds a photo."""
    if grid_for_task_count(task_count) is None:
        return False
    aligned = align_images(images, task_count)
    return filled_count(aligned) == task_count
