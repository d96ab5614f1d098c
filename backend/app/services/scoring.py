"""Scoring strategies.

Two formulas live here and are deliberately kept apart:

- quiz scoring (quick/specific tests): percentage of correct answers
- practice-test scoring: marks minus a fixed negative-marking penalty

They feed different consumers (result screen vs. practice-test averages).
"""

import math
from datetime import datetime, timezone

from app.schemas.practice_test import PoolQuestion, PracticeScore, PracticeTest
from app.schemas.test import (
    UNANSWERED,
    BucketScore,
    Difficulty,
    ResultStatus,
    ScoreBreakdown,
    TestResult,
    TestSession,
)

NEGATIVE_MARKING_PENALTY = 0.25  # marks lost per wrong answer


def round_half_up(value: float) -> int:
    """Round .5 upwards (not to even), matching the client's Math.round."""
    return math.floor(value + 0.5)


def percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(correct / total * 100)


def is_answer_correct(user_answer: int, correct_answer: int) -> bool:
    """Strict index equality; UNANSWERED never matches."""
    return user_answer != UNANSWERED and user_answer == correct_answer


# ============================================================================
# Quiz scoring
# ============================================================================


def score_quiz_session(
    session: TestSession,
    now: int,
    status: ResultStatus = ResultStatus.SUBMITTED,
) -> TestResult:
    """
    Grade a quiz session.

    Args:
        session: Session to grade
        now: Submission time, epoch ms
        status: SUBMITTED, or EXPIRED for auto-submission on time-out

    Returns:
        Immutable result with per-difficulty breakdown
    """
    buckets: dict[Difficulty, list[int]] = {d: [0, 0] for d in Difficulty}  # [correct, total]
    correct_answers = 0

    for question, answer in zip(session.questions, session.user_answers):
        correct = is_answer_correct(answer, question.correct_answer)
        bucket = buckets[question.difficulty]
        bucket[1] += 1
        if correct:
            bucket[0] += 1
            correct_answers += 1

    total = len(session.questions)

    return TestResult(
        test_id=session.test_id,
        test_type=session.test_type,
        class_id=session.class_id,
        subject_id=session.subject_id,
        chapter_id=session.chapter_id,
        topic_id=session.topic_id,
        score=percentage(correct_answers, total),
        total_questions=total,
        correct_answers=correct_answers,
        time_taken=max(0, now - session.start_time),
        completed_at=datetime.fromtimestamp(now / 1000, tz=timezone.utc),
        questions=list(session.questions),
        user_answers=list(session.user_answers),
        score_breakdown=ScoreBreakdown(
            easy=BucketScore(correct=buckets[Difficulty.EASY][0], total=buckets[Difficulty.EASY][1]),
            medium=BucketScore(
                correct=buckets[Difficulty.MEDIUM][0], total=buckets[Difficulty.MEDIUM][1]
            ),
            hard=BucketScore(correct=buckets[Difficulty.HARD][0], total=buckets[Difficulty.HARD][1]),
        ),
        status=status,
    )


# ============================================================================
# Practice-test scoring
# ============================================================================


def score_practice_test(
    test: PracticeTest,
    answers: dict[int, int],
    question_pool: dict[str, PoolQuestion],
) -> PracticeScore:
    """
    Grade a practice test with optional negative marking.

    Only answered questions count; an answer to a question missing from the
    pool counts as incorrect.
    """
    correct = 0
    for index, answer in answers.items():
        if not 0 <= index < len(test.question_ids):
            continue
        pool_question = question_pool.get(test.question_ids[index])
        if pool_question is not None and pool_question.correct == answer:
            correct += 1

    answered = sum(1 for index in answers if 0 <= index < len(test.question_ids))
    incorrect = answered - correct
    penalty = incorrect * NEGATIVE_MARKING_PENALTY if test.negative_marking else 0.0

    marks_per_question = test.max_marks / test.total_questions if test.total_questions else 0.0
    score = max(0.0, correct * marks_per_question - penalty)
    pct = round_half_up(score / test.max_marks * 100) if test.max_marks else 0

    return PracticeScore(
        score=score,
        percentage=pct,
        passed=pct >= test.passing_score,
        correct=correct,
        incorrect=incorrect,
    )
