"""
PR Review Agent

Pull Request diff와 LLM completion을 이용한 자동 코드 리뷰 코멘트 생성기
"""

__version__ = "1.0.0"

from .review.orchestrator import ReviewOrchestrator

__all__ = ["ReviewOrchestrator"]
