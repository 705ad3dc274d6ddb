"""
业务服务包
"""

from .audio import AudioService, read_limited_body, validate_language
from .pairs import PairService, parse_link_payload
from .samples import SampleService, normalize_kind
from .export import TrainingDataExporter, ExportFormat
from .transcription import Transcriber, StubTranscriber, get_transcriber

__all__ = [
    "AudioService",
    "read_limited_body",
    "validate_language",
    "PairService",
    "parse_link_payload",
    "SampleService",
    "normalize_kind",
    "TrainingDataExporter",
    "ExportFormat",
    "Transcriber",
    "StubTranscriber",
    "get_transcriber",
]
