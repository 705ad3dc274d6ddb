"""
音频上传服务
"""

import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from voicepair.core.exceptions import PayloadTooLargeError, StorageError, ValidationError
from voicepair.core.logging import service_logger
from voicepair.core.storage import (
    LANGUAGES,
    SampleStore,
    atomic_write_bytes,
    atomic_write_json,
    codec_for_extension,
    ensure_directory,
    extension_for_content_type,
)
from voicepair.schemas.audio import AudioRecord
from voicepair.services.transcription import Transcriber, get_transcriber


DEFAULT_CONTENT_TYPE = "application/octet-stream"


def validate_language(lang: str) -> str:
    """只接受 en / ht"""
    if lang not in LANGUAGES:
        raise ValidationError(
            f"Language must be 'en' or 'ht', got '{lang}'",
            details={"allowed": list(LANGUAGES)}
        )
    return lang


async def read_limited_body(
    chunks: AsyncIterator[bytes],
    max_size: int,
    declared_length: Optional[int] = None
) -> bytes:
    """
    读取请求体，超过上限立即中止

    Args:
        chunks: 请求体数据流
        max_size: 最大字节数
        declared_length: Content-Length 声明的长度

    Returns:
        bytes: 完整请求体
    """
    if declared_length is not None and declared_length > max_size:
        raise PayloadTooLargeError(max_size, declared_length)

    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
        if len(buffer) > max_size:
            raise PayloadTooLargeError(max_size)
    return bytes(buffer)


class AudioService:
    """音频上传服务"""

    def __init__(self, store: SampleStore, max_file_size: int,
                 transcriber: Optional[Transcriber] = None):
        self.store = store
        self.max_file_size = max_file_size
        self.transcriber = transcriber or get_transcriber()

    async def ingest(
        self,
        lang: str,
        content_type: Optional[str],
        body: bytes,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> AudioRecord:
        """
        保存音频文件和元数据

        Args:
            lang: 语言分区
            content_type: 请求的Content-Type
            body: 音频字节
            ip: 上传者IP
            user_agent: 上传者User-Agent

        Returns:
            AudioRecord: 已保存的音频记录
        """
        validate_language(lang)
        if len(body) > self.max_file_size:
            raise PayloadTooLargeError(self.max_file_size, len(body))

        content_type = content_type or DEFAULT_CONTENT_TYPE
        audio_id = uuid.uuid4().hex
        extension = extension_for_content_type(content_type)

        try:
            ensure_directory(self.store.audio_dir(lang))
            blob_path = await atomic_write_bytes(
                self.store.audio_blob_path(lang, audio_id, extension), body
            )

            transcript = await self.transcriber.transcribe(body, lang)
            record = AudioRecord(
                id=audio_id,
                lang=lang,
                created_at=datetime.now(timezone.utc),
                content_type=content_type,
                byte_size=len(body),
                audio_file=blob_path.name,
                transcript=transcript,
                codec=codec_for_extension(extension),
                ip=ip,
                user_agent=user_agent,
            )

            await atomic_write_json(self.store.audio_sidecar_path(lang, audio_id), record.to_json())
        except OSError as e:
            service_logger.error(f"Failed to store audio {audio_id} ({lang}): {e}")
            raise StorageError("ASR save failed", details=str(e))

        service_logger.info(f"Stored audio {audio_id} lang={lang} bytes={len(body)} codec={record.codec}")
        return record
