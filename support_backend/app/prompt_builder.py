#!/usr/bin/env python3
"""
Prompt builder module for the support assistant.

This module constructs prompts for the LLM using retrieved documentation and
recent conversation history.
"""

from typing import List

from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_DOCUMENTATION_CHARS = 2000
TRUNCATION_MARKER = "..."
REFUSAL_PHRASE = "Sorry, I don't have information about that."

STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "can", "how", "what", "when", "where",
    "why", "which", "who", "whom", "whose",
])


class PromptBuilder:
    """Builds prompts for the LLM with documentation and conversation history."""

    def __init__(self, max_documentation_chars: int = MAX_DOCUMENTATION_CHARS):
        """Initialize the prompt builder."""
        self.max_documentation_chars = max_documentation_chars
        self.system_prompt = f"""You are a helpful AI Support Assistant. Answer based ONLY on the provided documentation.

Rules:
1. Use ONLY the documentation to answer
2. If not in docs, say: "{REFUSAL_PHRASE}"
3. Be concise and helpful
4. Don't make up information

"""

    def build_prompt(self, query: str, documentation: str, context: str = "") -> str:
        """
        Build a prompt for the LLM.

        Args:
            query: User query
            documentation: Relevant documentation content
            context: Previous conversation context

        Returns:
            Formatted prompt string
        """
        # Truncate documentation to reduce token usage
        if len(documentation) > self.max_documentation_chars:
            documentation = documentation[:self.max_documentation_chars] + TRUNCATION_MARKER

        sections = [self.system_prompt, f"DOCUMENTATION:\n{documentation}\n\n"]
        if context:
            sections.append(f"RECENT CONVERSATION:\n{context}\n\n")
        sections.append(f"QUESTION:\n{query}")

        prompt = "".join(sections)
        logger.debug(f"Prompt built, total length: {len(prompt)}")
        return prompt


def extract_key_terms(query: str) -> List[str]:
    """Drop short words and stop words from a query."""
    return [
        term for term in query.lower().split()
        if len(term) > 2 and term not in STOP_WORDS
    ]
