"""
Review Data Models

코드 리뷰 코멘트, 실행 결과, completion 응답 스키마
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# GitHub line numbers are 32-bit ints
MAX_LINE_NUMBER = 2 ** 31 - 1


@dataclass(frozen=True)
class ReviewRequest:
    """파일 하나에 대한 completion 요청"""
    path: str
    prompt: str


@dataclass(frozen=True)
class ReviewComment:
    """모델이 제안한 코멘트 (검증 전)"""
    line_number: Optional[int]
    body: str


@dataclass(frozen=True)
class PlatformComment:
    """GitHub PR review 코멘트 형식"""
    path: str
    line: int
    body: str

    def __post_init__(self):
        """데이터 검증"""
        if self.line <= 0:
            raise ValueError("Line number must be positive")
        if not self.body.strip():
            raise ValueError("Comment body cannot be empty")

    def to_payload(self) -> Dict[str, Any]:
        """create review API 요청용 dict"""
        return {'path': self.path, 'line': self.line, 'body': self.body}


@dataclass
class RunResult:
    """리뷰 실행 결과"""
    comments_posted: int = 0
    files_total: int = 0
    files_reviewed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    submitted: bool = False
    comments: List[PlatformComment] = field(default_factory=list)


# Completion payload schema
class CompletionMessage(BaseModel):
    """completion choice의 message"""
    model_config = ConfigDict(extra='ignore')

    role: Optional[str] = None
    content: Optional[str] = None
    refusal: Optional[str] = None


class CompletionChoice(BaseModel):
    """completion choice"""
    model_config = ConfigDict(extra='ignore')

    index: int = 0
    message: CompletionMessage
    finish_reason: Optional[str] = None


class CompletionResult(BaseModel):
    """chat completion 응답"""
    model_config = ConfigDict(extra='ignore')

    model: Optional[str] = None
    choices: List[CompletionChoice] = Field(min_length=1)

    @property
    def content(self) -> Optional[str]:
        """첫 번째 choice의 텍스트"""
        return self.choices[0].message.content


class ReviewEntry(BaseModel):
    """모델 응답의 reviews 항목"""
    model_config = ConfigDict(extra='ignore')

    lineNumber: Optional[int] = None
    reviewComment: str = ""

    @field_validator('lineNumber', mode='before')
    @classmethod
    def coerce_line_number(cls, v):
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            number = v
        elif isinstance(v, float) and v.is_integer():
            number = int(v)
        elif isinstance(v, str) and v.strip().isascii() and v.strip().isdigit() and len(v.strip()) <= 10:
            number = int(v.strip())
        else:
            return None
        return number if 0 < number <= MAX_LINE_NUMBER else None

    @field_validator('reviewComment', mode='before')
    @classmethod
    def coerce_comment(cls, v):
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


class ReviewPayload(BaseModel):
    """모델 응답 JSON: {"reviews": [...]}"""
    model_config = ConfigDict(extra='ignore')

    reviews: List[Any]
