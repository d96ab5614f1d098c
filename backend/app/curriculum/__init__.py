"""Static curriculum content."""

from app.curriculum.index import CurriculumIndex

__all__ = ["CurriculumIndex"]
