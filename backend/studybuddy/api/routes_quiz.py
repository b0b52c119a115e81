# studybuddy/api/routes_quiz.py
import csv
import io
import logging
import uuid
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from studybuddy.config import settings
from studybuddy.models.catalog import Course
from studybuddy.services import quiz_session as qs
from studybuddy.services.db import get_session
from studybuddy.services.qgen_service import QuizGenerationError, QuizGenerator, get_quiz_generator
from studybuddy.services.quiz_store import QuizSessionStore, get_quiz_store

logger = logging.getLogger(__name__)

router = APIRouter()

OPTION_LETTERS = "ABCD"


class GenerateReq(BaseModel):
    courseId: uuid.UUID
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    numQuestions: int = Field(5, ge=1, le=settings.QUIZ_MAX_QUESTIONS)


class AnswerReq(BaseModel):
    optionIndex: int


class JumpReq(BaseModel):
    index: int


def _state_to_dict(sid: str, state: qs.QuizState) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": sid, "state": state.name}
    if isinstance(state, qs.Configuring):
        return out

    out["total"] = len(state.questions)
    out["selected_answers"] = list(state.selected_answers)
    out["answered"] = qs.answered_flags(state)

    if isinstance(state, qs.Active):
        out["current_index"] = state.current_index
        out["current_question"] = state.current_question.to_dict()
        out["questions"] = [q.to_dict() for q in state.questions]
        return out

    # Reviewing: answers and explanations are revealed together with the score
    out["questions"] = [
        dict(q.to_dict(reveal=True), is_correct=(picked == q.correct_answer))
        for q, picked in zip(state.questions, state.selected_answers)
    ]
    out["score"] = {
        "correct": state.score.correct,
        "total": state.score.total,
        "percentage": state.score.percentage,
    }
    return out


def _require(store: QuizSessionStore, sid: str) -> qs.QuizState:
    state = store.get(sid)
    if state is None:
        raise HTTPException(status_code=404, detail="Quiz session not found")
    return state


def _apply(store: QuizSessionStore, sid: str, event: qs.QuizEvent) -> Dict[str, Any]:
    _require(store, sid)
    try:
        state = store.apply(sid, event)
    except KeyError:
        raise HTTPException(status_code=404, detail="Quiz session not found")
    except qs.IncompleteQuizError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "unanswered": e.unanswered})
    except (qs.InvalidAnswerError, qs.QuestionIndexError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except qs.InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state_to_dict(sid, state)


@router.post("/sessions", status_code=201)
def create_session(store: QuizSessionStore = Depends(get_quiz_store)) -> Dict[str, Any]:
    sid = store.create()
    return _state_to_dict(sid, store.get(sid))


@router.get("/sessions/{sid}")
def get_session_state(sid: str, store: QuizSessionStore = Depends(get_quiz_store)) -> Dict[str, Any]:
    return _state_to_dict(sid, _require(store, sid))


@router.delete("/sessions/{sid}", status_code=204)
def delete_session(sid: str, store: QuizSessionStore = Depends(get_quiz_store)):
    if not store.delete(sid):
        raise HTTPException(status_code=404, detail="Quiz session not found")


@router.post("/sessions/{sid}/generate")
def generate_quiz(sid: str,
                  body: GenerateReq,
                  store: QuizSessionStore = Depends(get_quiz_store),
                  generator: QuizGenerator = Depends(get_quiz_generator)) -> Dict[str, Any]:
    state = _require(store, sid)
    if not isinstance(state, qs.Configuring):
        raise HTTPException(status_code=409, detail=f"Quiz already {state.name}; reset it first")

    with get_session() as s:
        course = s.get(Course, body.courseId)
        if not course:
            raise HTTPException(status_code=404, detail="Course not found")
        course_name, course_code = course.name, course.code

    try:
        questions = generator.generate(course_name, course_code, body.difficulty, body.numQuestions)
        state = store.apply(sid, qs.QuestionsLoaded(tuple(questions)))
    except (QuizGenerationError, qs.EmptyQuizError) as e:
        logger.warning("[QUIZ] generation failed for %s: %s", sid, e)
        raise HTTPException(status_code=502, detail=f"Failed to generate quiz: {e}")
    except KeyError:
        raise HTTPException(status_code=404, detail="Quiz session not found")
    except qs.InvalidTransitionError as e:
        # a concurrent generate on this session finished first
        logger.warning("[QUIZ] discarding generated quiz for %s: %s", sid, e)
        raise HTTPException(status_code=409, detail=str(e))

    logger.info("[QUIZ] %s active with %d question(s)", sid, len(state.questions))
    return _state_to_dict(sid, state)


@router.post("/sessions/{sid}/answer")
def select_answer(sid: str, body: AnswerReq, store: QuizSessionStore = Depends(get_quiz_store)):
    return _apply(store, sid, qs.SelectAnswer(body.optionIndex))


@router.post("/sessions/{sid}/next")
def next_question(sid: str, store: QuizSessionStore = Depends(get_quiz_store)):
    return _apply(store, sid, qs.NextQuestion())


@router.post("/sessions/{sid}/previous")
def previous_question(sid: str, store: QuizSessionStore = Depends(get_quiz_store)):
    return _apply(store, sid, qs.PreviousQuestion())


@router.post("/sessions/{sid}/jump")
def jump_to_question(sid: str, body: JumpReq, store: QuizSessionStore = Depends(get_quiz_store)):
    return _apply(store, sid, qs.JumpToQuestion(body.index))


@router.post("/sessions/{sid}/submit")
def submit_quiz(sid: str, store: QuizSessionStore = Depends(get_quiz_store)):
    out = _apply(store, sid, qs.Submit())
    logger.info("[QUIZ] %s submitted: %s", sid, out["score"])
    return out


@router.post("/sessions/{sid}/reset")
def reset_quiz(sid: str, store: QuizSessionStore = Depends(get_quiz_store)):
    return _apply(store, sid, qs.Reset())


@router.get("/sessions/{sid}/export")
def export_review(sid: str, format: str = "csv", store: QuizSessionStore = Depends(get_quiz_store)):
    """Export a submitted quiz as CSV (default) or JSON."""
    state = _require(store, sid)
    if not isinstance(state, qs.Reviewing):
        raise HTTPException(status_code=409, detail="Quiz has not been submitted yet")

    if format.lower() == "json":
        return JSONResponse(_state_to_dict(sid, state))

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "number", "question", "option_A", "option_B", "option_C", "option_D",
        "selected", "correct", "is_correct", "explanation",
    ])
    for i, (q, picked) in enumerate(zip(state.questions, state.selected_answers), start=1):
        writer.writerow([
            i,
            q.question,
            *q.options,
            OPTION_LETTERS[picked],
            OPTION_LETTERS[q.correct_answer],
            "yes" if picked == q.correct_answer else "no",
            q.explanation or "",
        ])
    writer.writerow([])
    writer.writerow(["score", f"{state.score.correct}/{state.score.total}", f"{state.score.percentage}%"])
    output.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{sid}.csv"'}
    return StreamingResponse(iter([output.read()]), media_type="text/csv", headers=headers)
