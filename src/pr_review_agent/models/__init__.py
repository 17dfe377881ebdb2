"""
Data Models

PR Review Agent 시스템의 핵심 데이터 모델들
"""

from .pr_diff import DEV_NULL, PullRequestContext, DiffFile, Hunk, DiffLine
from .review import (
    ReviewRequest,
    ReviewComment,
    PlatformComment,
    RunResult,
    CompletionResult,
    CompletionChoice,
    CompletionMessage,
    ReviewEntry,
    ReviewPayload,
)

__all__ = [
    "DEV_NULL",
    "PullRequestContext",
    "DiffFile",
    "Hunk",
    "DiffLine",
    "ReviewRequest",
    "ReviewComment",
    "PlatformComment",
    "RunResult",
    "CompletionResult",
    "CompletionChoice",
    "CompletionMessage",
    "ReviewEntry",
    "ReviewPayload",
]
