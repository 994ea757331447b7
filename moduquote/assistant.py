"""Gemini-backed writing assistant.

Drafts cover letters for quotations and short specifications for
line items. Both calls are best effort: failures are logged and a
fallback string is returned instead of raising.
"""

import logging
from typing import Optional

import google.generativeai as genai

from .models import Quotation
from .renderer import format_inr

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gemini-2.5-flash'

COVER_LETTER_EMPTY = "Could not generate cover letter."
COVER_LETTER_ERROR = "Error generating content. Please check your API key."

MAX_LETTER_ITEMS = 5


# Token tracking
class TokenTracker:
    def __init__(self):
        self.total_tokens = 0
        self.input_tokens = 0
        self.output_tokens = 0

    def add_usage(self, usage):
        if usage:
            prompt_tokens = getattr(usage, 'prompt_token_count', 0) or 0
            candidates_tokens = getattr(usage, 'candidates_token_count', 0) or 0
            total = getattr(usage, 'total_token_count', 0) or (prompt_tokens + candidates_tokens)
            self.input_tokens += prompt_tokens
            self.output_tokens += candidates_tokens
            self.total_tokens += total

    def get_usage(self):
        return {
            "total_tokens": self.total_tokens,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens
        }


def build_cover_letter_prompt(quotation: Quotation) -> str:
    key_items = "\n".join(
        f"- {item.name} ({item.category})"
        for item in quotation.items[:MAX_LETTER_ITEMS]
    )
    return f"""Act as a professional interior design sales consultant in India.
Write a polite, minimalist, and persuasive cover letter email for a quotation.

Client Name: {quotation.customer.name}
Project Total: {format_inr(quotation.total)}

Key Items Included:
{key_items}

Tone: Professional, warm, and design-focused. Keep it under 150 words."""


def build_description_prompt(item_name: str, category: str) -> str:
    return f"""Write a short, technical but attractive specification description for a modular furniture item.
Item: {item_name}
Category: {category}

Keep it under 30 words. Focus on durability and finish (e.g. BWR ply, Laminate finish, Soft close hinges)."""


class QuoteAssistant:
    """Generates quotation text with Gemini.

    Args:
        api_key: Gemini API key. Without it every call falls back.
        model_name: Gemini model to use.
        model: Ready-made model object exposing generate_content;
            skips client configuration when given.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        model=None
    ):
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    @property
    def available(self) -> bool:
        return self._model is not None or bool(self.api_key)

    def generate_cover_letter(
        self,
        quotation: Quotation,
        token_tracker: Optional[TokenTracker] = None
    ) -> str:
        """Draft a cover letter email for a quotation.

        Args:
            quotation: The quotation to write about.
            token_tracker: Collects token usage of this call, if given.

        Returns:
            The letter text, or a placeholder message on failure.
        """
        try:
            text = self._generate(
                build_cover_letter_prompt(quotation),
                max_output_tokens=1024,
                token_tracker=token_tracker
            )
        except Exception as e:
            logger.error(f"Gemini error while writing cover letter for {quotation.number}: {str(e)}")
            return COVER_LETTER_ERROR

        return text or COVER_LETTER_EMPTY

    def enhance_item_description(
        self,
        item_name: str,
        category: str,
        token_tracker: Optional[TokenTracker] = None
    ) -> str:
        """Write a short specification for a line item.

        Returns:
            The description, or an empty string on failure or when the
            item has no name.
        """
        if not item_name or not item_name.strip():
            return ""

        try:
            return self._generate(
                build_description_prompt(item_name, category),
                max_output_tokens=256,
                token_tracker=token_tracker
            )
        except Exception as e:
            logger.error(f"Gemini error while describing '{item_name}': {str(e)}")
            return ""

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise RuntimeError("API Key not found")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def _generate(
        self,
        prompt: str,
        max_output_tokens: int,
        token_tracker: Optional[TokenTracker] = None
    ) -> str:
        model = self._get_model()

        response = model.generate_content(
            prompt,
            generation_config=genai.GenerationConfig(
                temperature=0.7,
                max_output_tokens=max_output_tokens
            )
        )

        # Track token usage
        if token_tracker is not None and hasattr(response, 'usage_metadata'):
            token_tracker.add_usage(response.usage_metadata)

        return (response.text or "").strip()
