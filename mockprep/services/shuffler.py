"""Question and answer reshuffling for quiz retries.

A snapshot item is a plain dict::

    {
        "question_id": "…",
        "stem": "…",
        "type": "single_choice",
        "explanation": "…" or None,
        "options": [{"text": "…", "is_correct": False}, …],
    }

``shuffle_for_retry`` reorders the questions and, independently, the options
of every question. The returned mapping lets the grader translate a selection
made against the new option order back to the order the options were given
in, so correctness flags never have to leave the server.
"""

import random
from typing import NamedTuple, Optional

from mockprep.errors import InvalidInput


class RetryShuffle(NamedTuple):
    shuffled_questions: list[dict]
    answer_mapping: dict[str, list[int]]
    questions_for_ui: list[dict]


def shuffled_order(length: int, rng: random.Random) -> list[int]:
    """Return a uniformly random permutation of ``range(length)``."""
    order = list(range(length))
    rng.shuffle(order)
    return order


def validate_items(questions: list[dict]) -> None:
    """Reject question lists that cannot be shuffled into a valid attempt."""
    if not questions:
        raise InvalidInput("No questions provided")

    seen: set[str] = set()
    for position, question in enumerate(questions):
        if not isinstance(question, dict):
            raise InvalidInput(f"Question at position {position} is malformed")
        question_id = question.get("question_id")
        if not question_id:
            raise InvalidInput(f"Question at position {position} has no id")
        if question_id in seen:
            raise InvalidInput(f"Duplicate question id: {question_id}")
        seen.add(question_id)

        options = question.get("options")
        if options is None:
            continue
        if not isinstance(options, list):
            raise InvalidInput(f"Options of question {question_id} must be a list")
        for option in options:
            if not isinstance(option, dict) or not isinstance(option.get("text"), str):
                raise InvalidInput(f"Question {question_id} has an option without text")


def strip_correctness(question: dict) -> dict:
    """Client-facing copy of a snapshot item: options reduced to their text."""
    return {
        "question_id": question["question_id"],
        "stem": question.get("stem", ""),
        "type": question.get("type", "single_choice"),
        "options": [{"text": option["text"]} for option in question.get("options") or []],
    }


def shuffle_for_retry(questions: list[dict], rng: Optional[random.Random] = None) -> RetryShuffle:
    """Reshuffle questions and their options for a new attempt.

    The input is not mutated. Raises ``InvalidInput`` for an empty list,
    a question without an id, duplicate ids or an option without text.
    """
    validate_items(questions)
    rng = rng or random.SystemRandom()

    question_order = shuffled_order(len(questions), rng)

    shuffled_questions: list[dict] = []
    answer_mapping: dict[str, list[int]] = {}
    for old_position in question_order:
        question = questions[old_position]
        options = list(question.get("options") or [])

        # new_to_old[new_index] == old_index
        new_to_old = shuffled_order(len(options), rng)
        answer_mapping[question["question_id"]] = new_to_old

        shuffled = dict(question)
        shuffled["options"] = [dict(options[old_index]) for old_index in new_to_old]
        shuffled_questions.append(shuffled)

    questions_for_ui = [strip_correctness(q) for q in shuffled_questions]
    return RetryShuffle(shuffled_questions, answer_mapping, questions_for_ui)
