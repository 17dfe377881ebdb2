"""
Review Pipeline

This module resolves model suggestions onto diff coordinates and
orchestrates the per-file review of a pull request.
"""

from .resolver import CommentResolver
from .orchestrator import ReviewOrchestrator

__all__ = ['CommentResolver', 'ReviewOrchestrator']
