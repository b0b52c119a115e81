# studybuddy/services/qgen_service.py
import json
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple

from studybuddy.config import settings
from studybuddy.services.quiz_session import OPTIONS_PER_QUESTION, QuizQuestion

logger = logging.getLogger(__name__)

VALID_DIFFICULTIES = {"easy", "medium", "hard"}

DIFFICULTY_HINTS = {
    "easy": "Basic concepts and definitions",
    "medium": "Application and analysis",
    "hard": "Advanced problem-solving and critical thinking",
}

# NOTE: all literal braces are doubled {{ }} so .format() only fills the named slots
JSON_PROMPT = """You are an exam item writer. Output STRICT JSON only (no prose).
Generate {n} multiple choice questions for the subject "{course_name}" ({course_code}) with {difficulty} difficulty level.
Schema (a JSON array):
[
  {{
    "question": "Question text here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Brief explanation of the correct answer"
  }}
]
Rules:
- correctAnswer must be the index (0-3) of the correct option.
- Use exactly 4 options per question.
- Questions must be relevant to the subject.
- Difficulty: {difficulty_hint}
Return ONLY the JSON array, no additional text.
"""


class QuizGenerationError(Exception):
    """The generator produced nothing usable (or could not be called)."""


TextGenerator = Callable[[str], str]


def build_prompt(course_name: str, course_code: str, difficulty: str, n: int) -> str:
    return JSON_PROMPT.format(
        n=n,
        course_name=course_name,
        course_code=course_code,
        difficulty=difficulty,
        difficulty_hint=DIFFICULTY_HINTS.get(difficulty, DIFFICULTY_HINTS["medium"]),
    )


def _strip_code_fences(text: str) -> str:
    t = text.strip()
    # common model wrappers: ```json ... ``` or ``` ...
    if t.startswith("```"):
        t = t.strip("`")
        # after stripping, model may leave 'json\n[...]'
        if t.lower().startswith("json"):
            t = t[4:].lstrip()
    return t.strip()


def _normalize(item: Dict[str, Any]) -> Dict[str, Any]:
    """Make small fixes: trim strings, coerce option list and answer index."""
    if not isinstance(item, dict):
        return item
    item["question"] = str(item.get("question") or "").strip()
    opts = item.get("options")
    item["options"] = [str(x).strip() for x in opts] if isinstance(opts, list) else []
    answer = item.get("correctAnswer")
    if isinstance(answer, str) and answer.strip().isdigit():
        answer = int(answer.strip())
    item["correctAnswer"] = answer
    item["explanation"] = str(item.get("explanation") or "").strip() or None
    return item


def _is_valid(item: Dict[str, Any]) -> Tuple[bool, str]:
    """Quality gate: presence, option count and answer index range."""
    if not isinstance(item, dict):
        return False, "not a dict"
    if not item.get("question"):
        return False, "question is empty"
    opts = item.get("options")
    if not isinstance(opts, list) or len(opts) != OPTIONS_PER_QUESTION or not all(opts):
        return False, f"options must be {OPTIONS_PER_QUESTION} non-empty strings"
    answer = item.get("correctAnswer")
    if isinstance(answer, bool) or not isinstance(answer, int):
        return False, "correctAnswer must be an integer"
    if not 0 <= answer < OPTIONS_PER_QUESTION:
        return False, f"correctAnswer must be in 0..{OPTIONS_PER_QUESTION - 1}"
    return True, "ok"


def parse_questions(text: str, limit: Optional[int] = None) -> List[QuizQuestion]:
    """Parse model output into questions; raises QuizGenerationError if none survive."""
    text = _strip_code_fences(text or "")

    # extract the first [...] block from the completion
    start, end = text.find("["), text.rfind("]") + 1
    if start == -1 or end <= start:
        raise QuizGenerationError("Invalid quiz format received: no JSON array in model output")
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise QuizGenerationError(f"Invalid quiz format received: {e.msg}") from e

    if not isinstance(data, list) or not data:
        raise QuizGenerationError("Invalid quiz format received: empty question list")

    questions: List[QuizQuestion] = []
    for raw in data:
        item = _normalize(raw)
        ok, why = _is_valid(item)
        if not ok:
            logger.warning("[QGEN] dropping item: %s", why)
            continue
        questions.append(QuizQuestion(
            question=item["question"],
            options=tuple(item["options"]),
            correct_answer=item["correctAnswer"],
            explanation=item["explanation"],
        ))

    if not questions:
        raise QuizGenerationError("All generated questions failed quality checks")
    if limit is not None:
        questions = questions[:limit]
    return questions


@lru_cache(maxsize=1)
def _default_pipeline():
    # heavy import, only paid when a quiz is actually generated
    from transformers import AutoTokenizer, pipeline

    logger.info("[QGEN] loading model %s …", settings.QGEN_MODEL_ID)
    tokenizer = AutoTokenizer.from_pretrained(settings.QGEN_MODEL_ID)
    # Ensure padding token exists to avoid warnings on some environments
    if tokenizer.pad_token_id is None and tokenizer.eos_token_id is not None:
        tokenizer.pad_token_id = tokenizer.eos_token_id

    return pipeline(
        task="text-generation",
        model=settings.QGEN_MODEL_ID,
        tokenizer=tokenizer,
        device_map="auto",
        torch_dtype="auto",
    )


def transformers_text_generator(prompt: str) -> str:
    generate = _default_pipeline()
    return generate(
        prompt,
        max_new_tokens=settings.QGEN_MAX_NEW_TOKENS,
        do_sample=False,
        return_full_text=False,
    )[0]["generated_text"]


class QuizGenerator:
    """Produces a quiz for a course by prompting a text-generation model."""

    def __init__(self, text_generator: Optional[TextGenerator] = None):
        self.text_generator = text_generator or transformers_text_generator

    def generate(self, course_name: str, course_code: str, difficulty: str, n: int) -> List[QuizQuestion]:
        if difficulty not in VALID_DIFFICULTIES:
            raise ValueError(f"difficulty must be one of {sorted(VALID_DIFFICULTIES)}")
        if n < 1:
            raise ValueError("n must be at least 1")

        prompt = build_prompt(course_name, course_code, difficulty, n)
        logger.info("[QGEN] generating %d %s question(s) for %s", n, difficulty, course_code)
        try:
            out = self.text_generator(prompt)
        except Exception as e:
            logger.exception("[QGEN] model call failed")
            raise QuizGenerationError(f"Question generation failed: {e}") from e

        questions = parse_questions(out, limit=n)
        logger.info("[QGEN] got %d/%d usable question(s)", len(questions), n)
        return questions


_generator: Optional[QuizGenerator] = None


def get_quiz_generator() -> QuizGenerator:
    """FastAPI dependency; tests override it with a canned generator."""
    global _generator
    if _generator is None:
        _generator = QuizGenerator()
    return _generator
