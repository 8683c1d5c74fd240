from .synthesis import GoogleSynthesizer
from .completion import GroqCompleter
from .transcription import AssemblyAITranscriber
from .contracts import Completer, Synthesizer, Transcriber, ServiceClients

__all__ = [
    "AssemblyAITranscriber",
    "Completer",
    "GoogleSynthesizer",
    "GroqCompleter",
    "ServiceClients",
    "Synthesizer",
    "Transcriber",
]
