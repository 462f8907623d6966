"""Marketing content generation with the Anthropic Messages API.

Produces voice-search optimized business copy (description, FAQs, keywords)
that the audio pipeline can then narrate.
"""

import logging
import os
import time
from dataclasses import dataclass

import anthropic

from ..config import ContentConfig
from ..errors import ContentGenerationError

logger = logging.getLogger(__name__)

OVERLOADED_MESSAGE = "AI service is temporarily overloaded. Please try again in a moment."
AUTH_MESSAGE = "AI service authentication failed. Please contact support."
INVALID_MESSAGE = "Invalid request to AI service. Please check your input."
UNAVAILABLE_MESSAGE = "AI service is currently unavailable. Please try again later."


@dataclass
class BusinessDetails:
    """What the user tells us about their business."""

    business_name: str
    business_type: str
    location: str
    products_services: str | None = None
    target_customers: str | None = None


@dataclass
class GeneratedContent:
    """Generated text and usage metadata."""

    content: str
    tokens_used: int
    generation_time_ms: int
    model: str


def build_prompt(details: BusinessDetails) -> str:
    """Build the voice-search SEO prompt for a business."""
    extras = ""
    if details.products_services:
        extras += f"- Products/Services: {details.products_services}\n"
    if details.target_customers:
        extras += f"- Target Customers: {details.target_customers}\n"

    return f"""You are an expert Nepali SEO content creator specializing in voice search optimization for local businesses.

Create comprehensive voice-search optimized content for:
- Business: {details.business_name}
- Type: {details.business_type}
- Location: {details.location}, Nepal
{extras}
Generate the following content:

1. BUSINESS DESCRIPTION (150-200 words):
   - Voice-search friendly description
   - Include natural language phrases locals would use
   - Incorporate location-specific keywords
   - Make it conversational for voice assistants
   - Include phrases like "best {details.business_type} in {details.location}" and "near me" variations

2. 5 FREQUENTLY ASKED QUESTIONS:
   - Questions locals commonly ask about this business type
   - Include voice search patterns (What, Where, When, How, Why)
   - Provide concise, helpful answers
   - Use natural, conversational language

3. VOICE SEARCH KEYWORDS:
   - List 10 key phrases for voice search optimization
   - Include local variations and colloquial terms

Format the response with clear headings and make it ready for website implementation.
Focus on Nepali market context and local search behavior.
"""


def build_modification_prompt(
    original_content: str,
    user_request: str,
    business_name: str | None = None,
    history: list[tuple[str, str]] | None = None,
) -> str:
    """Build a prompt asking the model to revise existing content.

    Args:
        original_content: Content to modify
        user_request: What the user wants changed
        business_name: Business the content is for
        history: Earlier (role, message) pairs in the conversation
    """
    context = "\n".join(f"{role}: {message}" for role, message in history or []) or "No previous context"
    return f'''You are an expert content writer specializing in business content for Nepali SMEs.
Your task is to modify the existing content based on the user's request.

Original Content:
"""
{original_content}
"""

Business Name: {business_name or "N/A"}

User Request: {user_request}

Previous Conversation Context:
{context}

Instructions:
1. Carefully analyze the user's request and modify the content accordingly
2. Maintain the professional tone suitable for Nepali businesses
3. Keep the essential business information intact
4. Ensure the modified content is SEO-friendly and voice search optimized
5. If adding keywords, make them natural and contextual
6. Return only the modified content, no explanations

Modified Content:'''


def _map_status(status_code: int | None) -> str:
    if status_code in (429, 529):
        return OVERLOADED_MESSAGE
    if status_code == 401:
        return AUTH_MESSAGE
    if status_code == 400:
        return INVALID_MESSAGE
    return UNAVAILABLE_MESSAGE


class MarketingContentGenerator:
    """Generates marketing copy with Claude."""

    def __init__(
        self,
        config: ContentConfig | None = None,
        api_key: str | None = None,
        client: anthropic.Anthropic | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            config: Model and sampling settings
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            client: Pre-built Anthropic client

        Raises:
            ValueError: If no client is given and no API key is available
        """
        self._config = config or ContentConfig()
        if client is None:
            api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError(
                    "ANTHROPIC_API_KEY environment variable is not set. "
                    "Set it to use content generation."
                )
            client = anthropic.Anthropic(api_key=api_key)
        self._client = client

    def generate(self, details: BusinessDetails) -> GeneratedContent:
        """Generate description, FAQs and keywords for a business.

        Raises:
            ContentGenerationError: If the API call fails
        """
        return self.generate_from_prompt(build_prompt(details))

    def generate_from_prompt(self, prompt: str) -> GeneratedContent:
        """Run an arbitrary prompt, e.g. from build_modification_prompt.

        Raises:
            ContentGenerationError: If the API call fails
        """
        start_time = time.time()

        try:
            response = self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            logger.error(f"Content generation failed with status {e.status_code}: {e.message}")
            raise ContentGenerationError(_map_status(e.status_code), status_code=e.status_code) from e
        except anthropic.APIError as e:
            logger.error(f"Content generation failed: {e}")
            raise ContentGenerationError(UNAVAILABLE_MESSAGE) from e

        text = "".join(block.text for block in response.content if getattr(block, "type", "text") == "text")
        generation_time_ms = int((time.time() - start_time) * 1000)
        tokens_used = response.usage.input_tokens + response.usage.output_tokens

        logger.info(f"Generated {len(text)} chars of content in {generation_time_ms}ms")
        return GeneratedContent(
            content=text,
            tokens_used=tokens_used,
            generation_time_ms=generation_time_ms,
            model=response.model,
        )


__all__ = [
    "BusinessDetails",
    "GeneratedContent",
    "MarketingContentGenerator",
    "build_modification_prompt",
    "build_prompt",
]
