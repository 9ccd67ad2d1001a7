from .content import load_quiz_content, parse_quiz_content
from .dispatcher import (
    AnswerStrategy,
    coerce_question_type,
    dispatch,
    normalize_text_answer,
)
from .errors import ContentError, QuizError, StorageError, UnknownQuestionType
from .models import Option, Question, QuestionType, QuizContent, UserAnswer
from .reporter import AnswerEntry, AttemptRecord, build_attempt
from .scoring import (
    PerformanceLevel,
    ScoreResult,
    calculate_score,
    performance_level,
)
from .session import QuestionFeedback, QuizSession, SessionResult
from .state import (
    Applied,
    InvalidTransition,
    QuizSessionState,
    SessionAction,
    apply_action,
)
from .storage import AttemptSink, JsonlAttemptStore
from .validator import correct_answer_text, is_correct, validate_answers

__all__ = [
    "load_quiz_content",
    "parse_quiz_content",
    "AnswerStrategy",
    "coerce_question_type",
    "dispatch",
    "normalize_text_answer",
    "ContentError",
    "QuizError",
    "StorageError",
    "UnknownQuestionType",
    "Option",
    "Question",
    "QuestionType",
    "QuizContent",
    "UserAnswer",
    "AnswerEntry",
    "AttemptRecord",
    "build_attempt",
    "PerformanceLevel",
    "ScoreResult",
    "calculate_score",
    "performance_level",
    "QuestionFeedback",
    "QuizSession",
    "SessionResult",
    "Applied",
    "InvalidTransition",
    "QuizSessionState",
    "SessionAction",
    "apply_action",
    "AttemptSink",
    "JsonlAttemptStore",
    "correct_answer_text",
    "is_correct",
    "validate_answers",
]
