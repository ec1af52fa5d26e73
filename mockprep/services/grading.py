"""Server-side grading of quiz submissions."""

import math
from typing import Any, Optional

from mockprep.errors import InvalidInput


def normalize_selection(answer: Any) -> list[int]:
    """Coerce a submitted answer (index, list of indices or null) to a list."""
    if answer is None:
        return []
    if isinstance(answer, bool):
        raise InvalidInput("Answer must be an option index or a list of indices")
    if isinstance(answer, int):
        return [answer]
    if isinstance(answer, list) and all(isinstance(a, int) and not isinstance(a, bool) for a in answer):
        return list(answer)
    raise InvalidInput("Answer must be an option index or a list of indices")


def original_options(question: dict, mapping: Optional[list[int]]) -> list[dict]:
    """Options of a snapshot item put back in their pre-shuffle order."""
    options = question.get("options") or []
    if not mapping:
        return list(options)
    if sorted(mapping) != list(range(len(options))):
        raise InvalidInput(f"Answer mapping for question {question['question_id']} is not a permutation")
    restored: list[Optional[dict]] = [None] * len(options)
    for new_index, old_index in enumerate(mapping):
        restored[old_index] = options[new_index]
    return restored


def translate_selection(selection: list[int], mapping: Optional[list[int]], option_count: int) -> set[int]:
    """Map indices chosen against the served order back to original indices."""
    for index in selection:
        if index < 0 or index >= option_count:
            raise InvalidInput(f"Option index {index} is out of range")
    if not mapping:
        return set(selection)
    return {mapping[index] for index in selection}


def percentage(correct: int, total: int) -> int:
    """Whole percentage, rounding halves up."""
    if total <= 0:
        return 0
    return int(math.floor(correct * 100 / total + 0.5))


def grade_attempt(
    items: list[dict],
    answer_mapping: Optional[dict[str, list[int]]],
    responses: list[dict],
) -> dict:
    """Grade responses against a persisted snapshot.

    ``responses`` items are ``{"question_id": ..., "answer": ...}`` where the
    answer is expressed in the served (possibly shuffled) option order. A
    question is right only when the full set of correct options is selected.
    The whole submission is validated before anything is returned.
    """
    answer_mapping = answer_mapping or {}
    known_ids = {item["question_id"] for item in items}
    by_question: dict[str, list[int]] = {}
    for response in responses:
        question_id = response.get("question_id")
        if question_id not in known_ids:
            raise InvalidInput(f"Response for unknown question: {question_id}")
        by_question[question_id] = normalize_selection(response.get("answer"))

    details = []
    correct_count = 0
    for item in items:
        question_id = item["question_id"]
        mapping = answer_mapping.get(question_id)
        options = original_options(item, mapping)
        given = by_question.get(question_id, [])
        selected = translate_selection(given, mapping, len(options))
        correct = {index for index, option in enumerate(options) if option.get("is_correct")}

        is_right = bool(selected) and selected == correct
        if is_right:
            correct_count += 1

        served_options = item.get("options") or []
        details.append({
            "question_id": question_id,
            "given": given,
            "correct": [i for i, option in enumerate(served_options) if option.get("is_correct")],
            "is_right": is_right,
            "explanation": item.get("explanation"),
        })

    total = len(items)
    return {
        "score": percentage(correct_count, total),
        "correct_count": correct_count,
        "total_questions": total,
        "details": details,
    }
