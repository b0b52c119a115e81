"""
Quiz session state machine.

A session is one of three immutable states::

    Configuring --QuestionsLoaded--> Active --Submit--> Reviewing
         ^                                                  |
         +---------------------- Reset ---------------------+

``transition(state, event)`` is the only way to move between them. Illegal
combinations raise ``InvalidTransitionError``; guarded events raise a more
specific ``QuizError`` and leave the caller holding the unchanged state.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

UNANSWERED = -1
OPTIONS_PER_QUESTION = 4


class QuizError(Exception):
    """Base class for rejected quiz events."""


class InvalidTransitionError(QuizError):
    def __init__(self, state: "QuizState", event: "QuizEvent"):
        self.state_name = state.name
        self.event_name = type(event).__name__
        super().__init__(f"{self.event_name} is not allowed while {self.state_name}")


class EmptyQuizError(QuizError):
    def __init__(self):
        super().__init__("Quiz has no questions")


class InvalidAnswerError(QuizError):
    pass


class QuestionIndexError(QuizError):
    pass


class IncompleteQuizError(QuizError):
    def __init__(self, unanswered: Sequence[int]):
        self.unanswered = list(unanswered)
        super().__init__("Please answer all questions before submitting")


@dataclass(frozen=True)
class QuizQuestion:
    question: str
    options: Tuple[str, ...]
    correct_answer: int
    explanation: Optional[str] = None

    def to_dict(self, reveal: bool = False) -> dict:
        d = {"question": self.question, "options": list(self.options)}
        if reveal:
            d["correct_answer"] = self.correct_answer
            d["explanation"] = self.explanation
        return d


@dataclass(frozen=True)
class QuizScore:
    correct: int
    total: int

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        # half-up, so 2.5% shows as 3% rather than banker's 2%
        return int(math.floor(self.correct / self.total * 100 + 0.5))


# ---- states -----------------------------------------------------------------

@dataclass(frozen=True)
class Configuring:
    name = "configuring"


@dataclass(frozen=True)
class Active:
    questions: Tuple[QuizQuestion, ...]
    selected_answers: Tuple[int, ...]
    current_index: int = 0

    name = "active"

    @property
    def current_question(self) -> QuizQuestion:
        return self.questions[self.current_index]


@dataclass(frozen=True)
class Reviewing:
    questions: Tuple[QuizQuestion, ...]
    selected_answers: Tuple[int, ...]
    score: QuizScore = field(init=False)

    name = "reviewing"

    def __post_init__(self):
        object.__setattr__(self, "score", score(self.questions, self.selected_answers))


QuizState = Union[Configuring, Active, Reviewing]


# ---- events -----------------------------------------------------------------

@dataclass(frozen=True)
class QuestionsLoaded:
    questions: Tuple[QuizQuestion, ...]


@dataclass(frozen=True)
class SelectAnswer:
    option_index: int


@dataclass(frozen=True)
class NextQuestion:
    pass


@dataclass(frozen=True)
class PreviousQuestion:
    pass


@dataclass(frozen=True)
class JumpToQuestion:
    index: int


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Reset:
    pass


QuizEvent = Union[QuestionsLoaded, SelectAnswer, NextQuestion, PreviousQuestion,
                  JumpToQuestion, Submit, Reset]


# ---- scoring ----------------------------------------------------------------

def score(questions: Sequence[QuizQuestion], selected_answers: Sequence[int]) -> QuizScore:
    correct = sum(
        1 for q, picked in zip(questions, selected_answers) if picked == q.correct_answer
    )
    return QuizScore(correct=correct, total=len(questions))


def answered_flags(state: QuizState) -> List[bool]:
    """Per-question answered/unanswered flags for the question navigator."""
    if isinstance(state, Configuring):
        return []
    return [a != UNANSWERED for a in state.selected_answers]


def unanswered_indices(state: Active) -> List[int]:
    return [i for i, a in enumerate(state.selected_answers) if a == UNANSWERED]


# ---- reducer ----------------------------------------------------------------

def transition(state: QuizState, event: QuizEvent) -> QuizState:
    if isinstance(event, Reset):
        return Configuring()

    if isinstance(state, Configuring):
        if isinstance(event, QuestionsLoaded):
            questions = tuple(event.questions)
            if not questions:
                raise EmptyQuizError()
            return Active(
                questions=questions,
                selected_answers=(UNANSWERED,) * len(questions),
                current_index=0,
            )
        raise InvalidTransitionError(state, event)

    if isinstance(state, Active):
        return _active_transition(state, event)

    raise InvalidTransitionError(state, event)


def _active_transition(state: Active, event: QuizEvent) -> QuizState:
    last = len(state.questions) - 1

    if isinstance(event, SelectAnswer):
        n_options = len(state.current_question.options)
        if not 0 <= event.option_index < n_options:
            raise InvalidAnswerError(
                f"Option index {event.option_index} out of range 0..{n_options - 1}"
            )
        answers = list(state.selected_answers)
        answers[state.current_index] = event.option_index
        return Active(state.questions, tuple(answers), state.current_index)

    if isinstance(event, NextQuestion):
        return Active(state.questions, state.selected_answers, min(state.current_index + 1, last))

    if isinstance(event, PreviousQuestion):
        return Active(state.questions, state.selected_answers, max(state.current_index - 1, 0))

    if isinstance(event, JumpToQuestion):
        if not 0 <= event.index <= last:
            raise QuestionIndexError(f"Question {event.index} out of range 0..{last}")
        return Active(state.questions, state.selected_answers, event.index)

    if isinstance(event, Submit):
        missing = unanswered_indices(state)
        if missing:
            raise IncompleteQuizError(missing)
        return Reviewing(questions=state.questions, selected_answers=state.selected_answers)

    raise InvalidTransitionError(state, event)
