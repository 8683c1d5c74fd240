from .buffer import ChunkBuffer
from .energy import EnergyProfile
from .vad import VoiceActivityDetector
from .segmenter import UtteranceSegmenter

__all__ = ["ChunkBuffer", "EnergyProfile", "UtteranceSegmenter", "VoiceActivityDetector"]
