import logging
import time
from typing import Any

import anthropic

from notequiz.config import Settings
from notequiz.errors import UpstreamError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a professor trying to formulate quiz questions for your students."

_USER_PROMPT = """Given the following content, generate {count} unique multiple-choice questions as of timestamp {timestamp}. Format each question as follows:
1. Question text
a) Option 1
b) Option 2
c) Option 3
d) Option 4
Correct answer: [letter of correct option]

Separate questions with a single blank line and repeat this format for all {count} questions.

{content}"""


# PUBLIC_INTERFACE
def build_prompt(content: str, count: int, timestamp: int) -> str:
    """Return the user message asking for `count` questions about `content`."""
    return _USER_PROMPT.format(count=count, timestamp=timestamp, content=content)


# PUBLIC_INTERFACE
def create_client(settings: Settings) -> anthropic.AsyncAnthropic:
    """
    Build the Anthropic client from settings.

    SDK-level retries are disabled; a failed call surfaces to the caller.

    Raises:
        RuntimeError: ANTHROPIC_API_KEY is not configured.
    """
    if not settings.anthropic_api_key:
        raise RuntimeError("ANTHROPIC_API_KEY is not set. Add it to your .env file.")
    return anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key, max_retries=0)


class QuestionGenerator:
    """Asks the language model for quiz questions in the plain-text template."""

    # PUBLIC_INTERFACE
    def __init__(
        self,
        client: Any,
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.5,
        question_count: int = 5,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.question_count = question_count

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(cls, settings: Settings) -> "QuestionGenerator":
        return cls(
            client=create_client(settings),
            model=settings.anthropic_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            question_count=settings.question_count,
        )

    # PUBLIC_INTERFACE
    async def generate(self, content: str) -> str:
        """
        Request quiz questions for the given text.

        A millisecond timestamp is embedded in the prompt so repeated calls on
        the same note are not answered identically.

        Returns:
            str: The first text block of the model reply, unparsed.

        Raises:
            UpstreamError: The provider call failed or the reply had no text.
        """
        prompt = build_prompt(content, self.question_count, int(time.time() * 1000))
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise UpstreamError(f"quiz generation request failed: {exc}") from exc

        for block in response.content:
            text = getattr(block, "text", None)
            if text is not None:
                logger.debug("Model returned %d characters", len(text))
                return text
        raise UpstreamError("model reply contained no text")
