"""Service layer helpers for external integrations."""

from .llm_client import BedrockLlmClient, LlmInvocationError
from .transcribe import (
    TranscribeService,
    TranscriptionError,
    TranscriptionJobStatus,
)

__all__ = [
    "BedrockLlmClient",
    "LlmInvocationError",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionJobStatus",
]
