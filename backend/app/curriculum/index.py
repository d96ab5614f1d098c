"""Read-only curriculum index (Class -> Subject -> Chapter -> Topic -> Concept)."""

import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from app.core.logging import get_logger
from app.schemas.curriculum import (
    Chapter,
    Concept,
    CurriculumClass,
    CurriculumDocument,
    SearchMatch,
    Subject,
    Topic,
)

logger = get_logger(__name__)

MIN_SEARCH_QUERY_LENGTH = 3
SNIPPET_CHARS = 80


@dataclass(frozen=True)
class _Location:
    """Ancestors of a node, resolved once at load time."""

    class_id: str
    subject_id: str
    chapter_id: str
    topic_id: str | None = None


class CurriculumIndex:
    """Immutable lookup tables over a curriculum document."""

    def __init__(self, document: CurriculumDocument):
        self._document = document
        self._classes: dict[str, CurriculumClass] = {}
        self._subjects: dict[str, Subject] = {}
        self._chapters: dict[str, Chapter] = {}
        self._topics: dict[str, Topic] = {}
        self._concepts: dict[str, Concept] = {}
        self._locations: dict[str, _Location] = {}
        self._subject_class: dict[str, str] = {}

        for klass in document.classes:
            self._classes[klass.id] = klass
            for subject in klass.subjects:
                self._subjects[subject.id] = subject
                self._subject_class[subject.id] = klass.id
                for chapter in subject.chapters:
                    self._chapters[chapter.id] = chapter
                    self._locations[chapter.id] = _Location(klass.id, subject.id, chapter.id)
                    for topic in chapter.topics:
                        self._topics[topic.id] = topic
                        self._locations[topic.id] = _Location(
                            klass.id, subject.id, chapter.id, topic.id
                        )
                        for concept in topic.concepts:
                            self._concepts[concept.id] = concept
                            self._locations[f"concept:{concept.id}"] = _Location(
                                klass.id, subject.id, chapter.id, topic.id
                            )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurriculumIndex":
        return cls(CurriculumDocument.model_validate(data))

    @classmethod
    def load(cls, path: str | Path | None = None) -> "CurriculumIndex":
        """
        Load the curriculum from a JSON file.

        Args:
            path: JSON file path; None loads the bundled curriculum

        Returns:
            Populated index
        """
        if path is None:
            raw = resources.files("app.curriculum").joinpath("data/curriculum.json").read_text(
                encoding="utf-8"
            )
            source = "bundled"
        else:
            raw = Path(path).read_text(encoding="utf-8")
            source = str(path)

        index = cls.from_dict(json.loads(raw))
        logger.info(
            "curriculum_loaded",
            extra={
                "source": source,
                "classes": len(index._classes),
                "chapters": len(index._chapters),
                "concepts": len(index._concepts),
            },
        )
        return index

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_classes(self) -> list[CurriculumClass]:
        return list(self._document.classes)

    def get_class(self, class_id: str) -> CurriculumClass | None:
        return self._classes.get(class_id)

    def get_subject(self, subject_id: str) -> Subject | None:
        return self._subjects.get(subject_id)

    def get_chapter(self, chapter_id: str) -> Chapter | None:
        return self._chapters.get(chapter_id)

    def get_topic(self, topic_id: str) -> Topic | None:
        return self._topics.get(topic_id)

    def get_concept(self, concept_id: str) -> Concept | None:
        return self._concepts.get(concept_id)

    def get_chapters(self, subject_id: str, class_id: str | None = None) -> list[Chapter]:
        """Chapters of a subject; empty if the subject is not taught in class_id."""
        subject = self._subjects.get(subject_id)
        if subject is None:
            return []
        if class_id is not None and self._subject_class.get(subject_id) != class_id:
            return []
        return list(subject.chapters)

    def get_topics(self, chapter_id: str) -> list[Topic]:
        chapter = self._chapters.get(chapter_id)
        return list(chapter.topics) if chapter else []

    def locate(self, node_id: str) -> _Location | None:
        """Ancestor ids of a chapter or topic."""
        return self._locations.get(node_id)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_content(self, query: str) -> list[SearchMatch]:
        """
        Case-insensitive substring search over titles, content and bullets.

        Queries shorter than three characters return no matches.
        """
        needle = (query or "").strip().lower()
        if len(needle) < MIN_SEARCH_QUERY_LENGTH:
            return []

        matches: list[SearchMatch] = []
        for chapter_id, chapter in self._chapters.items():
            loc = self._locations[chapter_id]
            if needle in chapter.title.lower():
                matches.append(
                    SearchMatch(
                        kind="chapter",
                        id=chapter.id,
                        title=chapter.title,
                        class_id=loc.class_id,
                        subject_id=loc.subject_id,
                        chapter_id=chapter.id,
                    )
                )

            for topic in chapter.topics:
                if needle in topic.title.lower():
                    matches.append(
                        SearchMatch(
                            kind="topic",
                            id=topic.id,
                            title=topic.title,
                            class_id=loc.class_id,
                            subject_id=loc.subject_id,
                            chapter_id=chapter.id,
                            topic_id=topic.id,
                        )
                    )

                for concept in topic.concepts:
                    snippet = _concept_snippet(concept, needle)
                    if snippet is None:
                        continue
                    matches.append(
                        SearchMatch(
                            kind="concept",
                            id=concept.id,
                            title=concept.title,
                            class_id=loc.class_id,
                            subject_id=loc.subject_id,
                            chapter_id=chapter.id,
                            topic_id=topic.id,
                            snippet=snippet,
                        )
                    )

        return matches


def _concept_snippet(concept: Concept, needle: str) -> str | None:
    """Return the first matching text of a concept, or None if nothing matches."""
    for text in (concept.title, concept.content, concept.key_takeaway, *concept.bullets):
        if needle in text.lower():
            return text[:SNIPPET_CHARS]
    return None
