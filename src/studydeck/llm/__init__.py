"""Language model client and response schemas."""

from .client import GenerationClient, parse_flashcard_response, parse_summary_response

__all__ = ["GenerationClient", "parse_flashcard_response", "parse_summary_response"]
