"""
PR Diff Data Models

Pull Request 메타데이터와 unified diff 구조 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set


# 삭제된 파일의 post-change 경로
DEV_NULL = "/dev/null"


@dataclass(frozen=True)
class PullRequestContext:
    """리뷰 대상 PR 정보"""
    owner: str
    repo_name: str
    pull_number: int
    title: str
    description: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.repo_name:
            raise ValueError("Owner and repository name are required")
        if self.pull_number <= 0:
            raise ValueError("PR number must be positive")

    @property
    def full_name(self) -> str:
        """owner/repo 형식의 저장소 이름"""
        return f"{self.owner}/{self.repo_name}"


@dataclass(frozen=True)
class DiffLine:
    """hunk 안의 한 줄 (marker 문자 포함)"""
    line_number_right: Optional[int]
    content: str

    @property
    def marker(self) -> str:
        return self.content[:1]

    @property
    def is_addition(self) -> bool:
        return self.marker == '+'

    @property
    def is_removal(self) -> bool:
        return self.marker == '-'


@dataclass
class Hunk:
    """파일 diff의 개별 hunk"""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str = ""
    lines: List[DiffLine] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_count < 0 or self.new_count < 0:
            raise ValueError("Line counts must be non-negative")


@dataclass
class DiffFile:
    """파일 단위 변경사항"""
    path: str
    hunks: List[Hunk] = field(default_factory=list)
    is_deleted: bool = False
    source_path: Optional[str] = None
    is_new: bool = False
    is_binary: bool = False
    is_renamed: bool = False

    @property
    def lines(self) -> List[DiffLine]:
        """모든 hunk의 줄을 diff 순서대로 반환"""
        return [line for hunk in self.hunks for line in hunk.lines]

    @property
    def display_path(self) -> str:
        """로그용 경로 (삭제된 파일은 원래 경로)"""
        if self.is_deleted and self.source_path:
            return self.source_path
        return self.path

    def right_line_numbers(self) -> Set[int]:
        """코멘트를 달 수 있는 post-change 라인 번호"""
        return {line.line_number_right for line in self.lines if line.line_number_right is not None}

    def changed_line_numbers(self) -> Set[int]:
        """추가된 라인 번호만 반환"""
        return {line.line_number_right for line in self.lines if line.is_addition}

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.is_addition)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.is_removal)
