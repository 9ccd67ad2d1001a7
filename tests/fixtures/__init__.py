"""Shared testing helpers for the lingo_quiz test suite."""

from .clock import FakeClock  # noqa: F401
from .content import (  # noqa: F401
    fb_question,
    make_content,
    mc_question,
    raw_content_document,
    tf_question,
    three_question_content,
)

__all__ = [
    "FakeClock",
    "fb_question",
    "make_content",
    "mc_question",
    "raw_content_document",
    "tf_question",
    "three_question_content",
]
