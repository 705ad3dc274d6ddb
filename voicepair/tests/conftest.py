"""
测试配置和fixtures
"""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

import json
import pytest
from pathlib import Path
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient

from voicepair.config import Settings
from voicepair.core.storage import SampleStore
from voicepair.main import create_app


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """静态资源目录"""
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<html><body>VoicePair</body></html>", encoding="utf-8")
    (public / "app.js").write_text("console.log('voicepair');", encoding="utf-8")
    return public


@pytest.fixture
def test_settings(tmp_path: Path, public_dir: Path) -> Settings:
    """指向临时目录的配置"""
    return Settings(
        data_dir=tmp_path / "data",
        public_dir=public_dir,
        log_to_file=False,
        max_file_size=1024,
        node_env="development"
    )


@pytest.fixture
def store(test_settings: Settings) -> SampleStore:
    return SampleStore(test_settings.data_dir)


@pytest.fixture
def test_app(test_settings: Settings):
    return create_app(test_settings)


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供测试客户端"""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


# 测试数据工厂
class TestDataFactory:
    """测试数据工厂"""

    @staticmethod
    def link_payload(**kwargs):
        """样本对请求数据"""
        default_data = {
            "term": "Hypertension",
            "category": "medical",
            "enText": "Hypertension",
            "htText": "Tansyon wo",
            "enAudioId": "en-audio-1",
            "htAudioId": "ht-audio-1",
            "annotator": "wally",
            "consent": True
        }
        default_data.update(kwargs)
        return default_data

    @staticmethod
    def write_pair(store: SampleStore, sample_id: str, mtime: float = None, **kwargs) -> Path:
        """直接写入样本对文件"""
        record = {
            "kind": "pair",
            "sampleId": sample_id,
            "createdAt": "2025-09-10T00:54:22.382000+00:00",
            "term": "Premium",
            "category": "insurance",
            "annotator": "anonymous",
            "consent": True,
            "en": {"text": "Premium", "audioRef": "en-1"},
            "ht": {"text": "Prim", "audioRef": "ht-1"}
        }
        record.update(kwargs)
        store.pairs_dir.mkdir(parents=True, exist_ok=True)
        path = store.pair_path(sample_id)
        path.write_text(json.dumps(record), encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    @staticmethod
    def write_audio(store: SampleStore, audio_id: str, lang: str = "en", mtime: float = None, **kwargs) -> Path:
        """直接写入音频元数据"""
        record = {
            "kind": "audio",
            "id": audio_id,
            "lang": lang,
            "createdAt": "2025-09-10T00:54:22.382000+00:00",
            "contentType": "audio/webm",
            "bytes": 3,
            "audioFile": f"{audio_id}.webm",
            "transcript": "Hello World (ASR stub)",
            "codec": "opus",
            "sr": None,
            "duration_s": None,
            "domain": []
        }
        record.update(kwargs)
        store.audio_dir(lang).mkdir(parents=True, exist_ok=True)
        (store.audio_dir(lang) / f"{audio_id}.webm").write_bytes(b"abc")
        path = store.audio_sidecar_path(lang, audio_id)
        path.write_text(json.dumps(record), encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path


@pytest.fixture
def test_data_factory():
    """测试数据工厂fixture"""
    return TestDataFactory
