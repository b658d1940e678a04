from .base import ModelProvider
from .factory import create_model_provider
from .models import Part, ResponseFragment, StreamingResponse, Turn
from .providers import GeminiProvider, OpenAIProvider

__all__ = [
    "ModelProvider",
    "create_model_provider",
    "Part",
    "ResponseFragment",
    "StreamingResponse",
    "Turn",
    "GeminiProvider",
    "OpenAIProvider",
]
