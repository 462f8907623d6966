"""Marketing content generation."""

from .generator import (
    BusinessDetails,
    GeneratedContent,
    MarketingContentGenerator,
    build_modification_prompt,
    build_prompt,
)

__all__ = [
    "BusinessDetails",
    "GeneratedContent",
    "MarketingContentGenerator",
    "build_modification_prompt",
    "build_prompt",
]
