"""Audio generation pipeline: fallback orchestration and the service boundary."""

from .orchestrator import FallbackOrchestrator, SynthesisOutcome
from .service import (
    AudioGenerationService,
    GenerationOptions,
    GenerationResult,
    SynthesisRequest,
    build_service,
)

__all__ = [
    "AudioGenerationService",
    "FallbackOrchestrator",
    "GenerationOptions",
    "GenerationResult",
    "SynthesisOutcome",
    "SynthesisRequest",
    "build_service",
]
