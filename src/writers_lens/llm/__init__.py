from .openai_client import OpenAISpanClient, SpanRequestMetadata

__all__ = ["OpenAISpanClient", "SpanRequestMetadata"]
