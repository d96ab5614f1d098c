"""Pydantic schemas for the curriculum tree."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Concept(BaseModel):
    """Leaf content unit of the curriculum."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str = ""
    bullets: list[str] = Field(default_factory=list)
    key_takeaway: str = ""


class Topic(BaseModel):
    """Topic within a chapter."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    concepts: list[Concept] = Field(default_factory=list)


class Chapter(BaseModel):
    """Chapter within a subject."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    topics: list[Topic] = Field(default_factory=list)


class Subject(BaseModel):
    """Subject taught in a class."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    chapters: list[Chapter] = Field(default_factory=list)


class CurriculumClass(BaseModel):
    """School class (grade), the curriculum root."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    subjects: list[Subject] = Field(default_factory=list)


class CurriculumDocument(BaseModel):
    """Top-level shape of the static curriculum JSON file."""

    classes: list[CurriculumClass] = Field(default_factory=list)


class SearchMatch(BaseModel):
    """Single curriculum search hit."""

    kind: Literal["chapter", "topic", "concept"]
    id: str
    title: str
    class_id: str
    subject_id: str
    chapter_id: str
    topic_id: str | None = None
    snippet: str | None = None


class ChapterSummary(BaseModel):
    """Chapter listing entry (no nested content)."""

    id: str
    title: str
    topic_count: int
    concept_count: int

    @classmethod
    def from_chapter(cls, chapter: Chapter) -> "ChapterSummary":
        return cls(
            id=chapter.id,
            title=chapter.title,
            topic_count=len(chapter.topics),
            concept_count=sum(len(topic.concepts) for topic in chapter.topics),
        )
