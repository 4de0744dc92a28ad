"""Prompt templates for the text classifier."""

from __future__ import annotations

TEXT_CATEGORIES: tuple[str, ...] = (
    "Hate speech",
    "Violence or threats",
    "Adult content",
    "Harassment or bullying",
    "Spam or misleading information",
)

TEXT_MODERATION_PROMPT = """Analyze the following text for inappropriate content including:
{categories}
Text to analyze: "{text}"
Respond with JSON format:
{{
  "is_inappropriate": true/false,
  "categories": ["category1", "category2"],
  "confidence": 0.0-1.0,
  "reasoning": "explanation"
}}"""


def render_text_prompt(text: str) -> str:
    categories = "\n".join(f"- {name}" for name in TEXT_CATEGORIES)
    return TEXT_MODERATION_PROMPT.format(categories=categories, text=text)
