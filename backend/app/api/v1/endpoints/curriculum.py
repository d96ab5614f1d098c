"""Curriculum browsing and search endpoints."""

from fastapi import APIRouter, Query

from app.core.app_exceptions import NotFoundError
from app.core.dependencies import StateDep
from app.schemas.curriculum import (
    Chapter,
    ChapterSummary,
    Concept,
    CurriculumClass,
    SearchMatch,
    Topic,
)

router = APIRouter()


def _not_found(kind: str, node_id: str) -> NotFoundError:
    return NotFoundError(f"{kind} {node_id} not found", details={f"{kind.lower()}_id": node_id})


@router.get("/classes", response_model=list[CurriculumClass])
def list_classes(state: StateDep) -> list[CurriculumClass]:
    return state.curriculum.get_classes()


@router.get("/classes/{class_id}", response_model=CurriculumClass)
def get_class(class_id: str, state: StateDep) -> CurriculumClass:
    klass = state.curriculum.get_class(class_id)
    if klass is None:
        raise _not_found("Class", class_id)
    return klass


@router.get("/subjects/{subject_id}/chapters", response_model=list[ChapterSummary])
def list_chapters(
    subject_id: str,
    state: StateDep,
    class_id: str | None = Query(None),
) -> list[ChapterSummary]:
    """Chapters of a subject without their topic content."""
    if state.curriculum.get_subject(subject_id) is None:
        raise _not_found("Subject", subject_id)
    return [
        ChapterSummary.from_chapter(chapter)
        for chapter in state.curriculum.get_chapters(subject_id, class_id)
    ]


@router.get("/chapters/{chapter_id}", response_model=Chapter)
def get_chapter(chapter_id: str, state: StateDep) -> Chapter:
    chapter = state.curriculum.get_chapter(chapter_id)
    if chapter is None:
        raise _not_found("Chapter", chapter_id)
    return chapter


@router.get("/chapters/{chapter_id}/topics", response_model=list[Topic])
def list_topics(chapter_id: str, state: StateDep) -> list[Topic]:
    if state.curriculum.get_chapter(chapter_id) is None:
        raise _not_found("Chapter", chapter_id)
    return state.curriculum.get_topics(chapter_id)


@router.get("/topics/{topic_id}", response_model=Topic)
def get_topic(topic_id: str, state: StateDep) -> Topic:
    topic = state.curriculum.get_topic(topic_id)
    if topic is None:
        raise _not_found("Topic", topic_id)
    return topic


@router.get("/concepts/{concept_id}", response_model=Concept)
def get_concept(concept_id: str, state: StateDep) -> Concept:
    concept = state.curriculum.get_concept(concept_id)
    if concept is None:
        raise _not_found("Concept", concept_id)
    return concept


@router.get("/search", response_model=list[SearchMatch])
def search(state: StateDep, q: str = Query(..., description="At least 3 characters")) -> list[SearchMatch]:
    return state.curriculum.search_content(q)
