"""Real-time voice call pipeline: VAD segmentation, STT, LLM and TTS over WebSocket."""

__version__ = "0.1.0"

__all__ = ["__version__"]
