"""
API依赖项 - 从 app.state 中的配置构建服务
"""

from typing import Optional

from fastapi import Depends, Request

from voicepair.config import Settings
from voicepair.core.storage import SampleStore
from voicepair.services.audio import AudioService
from voicepair.services.export import TrainingDataExporter
from voicepair.services.pairs import PairService
from voicepair.services.samples import SampleService
from voicepair.services.transcription import get_transcriber


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(settings: Settings = Depends(get_settings)) -> SampleStore:
    return SampleStore(settings.data_dir)


def get_audio_service(
    settings: Settings = Depends(get_settings),
    store: SampleStore = Depends(get_store),
) -> AudioService:
    return AudioService(store, settings.max_file_size, get_transcriber())


def get_pair_service(
    settings: Settings = Depends(get_settings),
    store: SampleStore = Depends(get_store),
) -> PairService:
    return PairService(store, verify_audio_refs=settings.verify_audio_refs)


def get_sample_service(
    settings: Settings = Depends(get_settings),
    store: SampleStore = Depends(get_store),
) -> SampleService:
    return SampleService(store, limit=settings.list_limit)


def get_exporter(store: SampleStore = Depends(get_store)) -> TrainingDataExporter:
    return TrainingDataExporter(store)


def get_declared_length(request: Request) -> Optional[int]:
    """请求头声明的 Content-Length，缺失或非法时为 None"""
    value = request.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
