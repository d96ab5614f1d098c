"""Quiz question generation from curriculum concepts.

Questions are derived at request time and live only as long as the session
or result that holds them. Difficulty is a random label, not a property of
the content.
"""

import random
import re

from app.common.clock import Clock, make_id, now_ms
from app.core.logging import get_logger
from app.curriculum.index import CurriculumIndex
from app.schemas.curriculum import Concept
from app.schemas.test import Difficulty, Question, QuestionType

logger = get_logger(__name__)

MULTIPLE_CHOICE_THRESHOLD = 0.3  # random() above this -> multiple choice (~70%)
MC_OPTION_COUNT = 4
MC_DISTRACTORS = 3
BULLET_SEPARATOR = " - "

QUICK_TEST_MIN = 3
QUICK_TEST_EXTRA = 2  # quick tests have 3..5 questions
SPECIFIC_TEST_MAX = 15
SPECIFIC_TEST_MIN = 10

# Naive lexical negation, applied as raw substring replacement in this order.
# It can mangle words ("this" -> "this not"); kept as-is on purpose.
NEGATIONS: tuple[tuple[str, str], ...] = (
    ("is", "is not"),
    ("are", "are not"),
    ("help", "hinder"),
)


def negate_statement(statement: str) -> str:
    """Turn a true statement into a (usually) false one by word substitution."""
    result = statement
    for pattern, replacement in NEGATIONS:
        result = re.sub(pattern, replacement, result)
    return result


def bullet_answer_text(bullet: str) -> str:
    """Answer part of a "Term - definition" bullet (whole bullet if no separator)."""
    _, *parts = bullet.split(BULLET_SEPARATOR)
    return BULLET_SEPARATOR.join(parts) or bullet


def build_true_false(concept: Concept, rng: random.Random) -> tuple[str, list[str], int, str]:
    """Return (question, options, correct_answer, explanation) for a true/false item."""
    statement = concept.key_takeaway or concept.content
    options = ["True", "False"]

    if rng.random() > 0.5:
        return (
            f"True or False: {statement}",
            options,
            0,
            f"This statement is correct. {statement}",
        )

    return (
        f"True or False: {negate_statement(statement)}",
        options,
        1,
        f"This statement is incorrect. The correct statement is: {statement}",
    )


def build_multiple_choice(
    concept: Concept,
    topic_concepts: list[Concept],
    rng: random.Random,
) -> tuple[str, list[str], int, str]:
    """Return (question, options, correct_answer, explanation) for a multiple-choice item."""
    if not concept.bullets:
        options = [
            concept.key_takeaway,
            concept.content[:50] + "...",
            "None of the above",
            "All of the above",
        ]
        return f'What is the main idea of "{concept.title}"?', options, 0, concept.key_takeaway

    correct_bullet = rng.choice(concept.bullets)
    correct_text = bullet_answer_text(correct_bullet)

    # Distractors come only from the other concepts of the same topic
    pool = [
        bullet
        for other in topic_concepts
        if other.id != concept.id
        for bullet in other.bullets
        if bullet != correct_bullet
    ]

    options = [correct_text]
    while pool and len(options) < 1 + MC_DISTRACTORS:
        wrong = bullet_answer_text(pool.pop(rng.randrange(len(pool))))
        if wrong not in options:
            options.append(wrong)

    while len(options) < MC_OPTION_COUNT:
        options.append(f"Option {len(options) + 1}")

    rng.shuffle(options)
    correct_answer = options.index(correct_text)

    return (
        f'Based on the concept "{concept.title}", which of the following is correct?',
        options,
        correct_answer,
        f'The correct answer is "{correct_text}". {concept.key_takeaway}',
    )


def generate_question_from_concept(
    concept: Concept,
    topic_id: str,
    chapter_id: str,
    subject_id: str,
    class_id: str,
    topic_concepts: list[Concept] | None,
    rng: random.Random,
    timestamp: int,
) -> Question:
    """
    Generate one question for a concept.

    Args:
        concept: Source concept
        topic_id, chapter_id, subject_id, class_id: Curriculum location
        topic_concepts: All concepts of the concept's topic (distractor source)
        rng: Random source (seed it for reproducible output)
        timestamp: Creation time, epoch ms

    Returns:
        Generated question
    """
    question_type = (
        QuestionType.MULTIPLE_CHOICE
        if rng.random() > MULTIPLE_CHOICE_THRESHOLD
        else QuestionType.TRUE_FALSE
    )
    difficulty = rng.choice(list(Difficulty))

    if question_type == QuestionType.TRUE_FALSE:
        text, options, correct_answer, explanation = build_true_false(concept, rng)
    else:
        text, options, correct_answer, explanation = build_multiple_choice(
            concept, topic_concepts or [], rng
        )

    return Question(
        id=make_id("q", timestamp, rng),
        topic_id=topic_id,
        chapter_id=chapter_id,
        subject_id=subject_id,
        class_id=class_id,
        type=question_type,
        question=text,
        options=options,
        correct_answer=correct_answer,
        explanation=explanation,
        difficulty=difficulty,
        timestamp=timestamp,
        related_concept=concept.title,
    )


class QuestionGenerator:
    """Builds quick (topic) and specific (chapter) question sets."""

    def __init__(
        self,
        curriculum: CurriculumIndex,
        rng: random.Random | None = None,
        clock: Clock = now_ms,
    ):
        self.curriculum = curriculum
        self.rng = rng or random.Random()
        self.clock = clock

    def generate_quick_test_questions(
        self,
        topic_id: str,
        class_id: str,
        subject_id: str,
        chapter_id: str,
    ) -> list[Question]:
        """3-5 questions from one topic, cycling concepts; [] for an unknown/empty topic."""
        topic = self.curriculum.get_topic(topic_id)
        if topic is None or not topic.concepts:
            logger.info("quick_test_no_concepts", extra={"topic_id": topic_id})
            return []

        concepts = topic.concepts
        count = min(QUICK_TEST_MIN + self.rng.randint(0, QUICK_TEST_EXTRA), len(concepts))
        timestamp = self.clock()

        return [
            generate_question_from_concept(
                concepts[i % len(concepts)],
                topic_id,
                chapter_id,
                subject_id,
                class_id,
                concepts,
                self.rng,
                timestamp,
            )
            for i in range(count)
        ]

    def generate_specific_test_questions(
        self,
        class_id: str,
        subject_id: str,
        chapter_id: str,
    ) -> list[Question]:
        """
        Up to 15 questions walking the chapter in order, topped up to 10.

        The top-up draws random concepts from topics that have any, so small
        chapters repeat concepts rather than loop forever. A chapter without
        concepts yields [].
        """
        chapter = self.curriculum.get_chapter(chapter_id)
        if chapter is None:
            logger.info("specific_test_unknown_chapter", extra={"chapter_id": chapter_id})
            return []

        populated = [topic for topic in chapter.topics if topic.concepts]
        if not populated:
            logger.info("specific_test_no_concepts", extra={"chapter_id": chapter_id})
            return []

        timestamp = self.clock()
        questions: list[Question] = []

        for topic in populated:
            for concept in topic.concepts:
                if len(questions) >= SPECIFIC_TEST_MAX:
                    break
                questions.append(
                    generate_question_from_concept(
                        concept,
                        topic.id,
                        chapter_id,
                        subject_id,
                        class_id,
                        topic.concepts,
                        self.rng,
                        timestamp,
                    )
                )
            if len(questions) >= SPECIFIC_TEST_MAX:
                break

        while len(questions) < SPECIFIC_TEST_MIN:
            topic = self.rng.choice(populated)
            concept = self.rng.choice(topic.concepts)
            questions.append(
                generate_question_from_concept(
                    concept,
                    topic.id,
                    chapter_id,
                    subject_id,
                    class_id,
                    topic.concepts,
                    self.rng,
                    timestamp,
                )
            )

        return questions
