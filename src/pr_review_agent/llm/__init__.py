"""
LLM Review Layer

This module builds per-file review prompts, calls the completion
service, and decodes the model's structured answer.
"""

from .prompts import PromptBuilder
from .client import CompletionClient
from .response import ResponseParser

__all__ = ['PromptBuilder', 'CompletionClient', 'ResponseParser']
