"""
GitHub Integration Layer

This module provides GitHub API integration for PR metadata and diff
retrieval, unified diff parsing, and review submission.
"""

from .client import GitHubClient, parse_repo_ref
from .parser import DiffParser

__all__ = ['GitHubClient', 'DiffParser', 'parse_repo_ref']
