"""
文件存储系统 - 按语言分区的本地样本存储
"""

import os
import json
import uuid
import asyncio
from pathlib import Path
from typing import Any, Callable, List, NamedTuple, Union

import aiofiles
import aiofiles.os

from voicepair.core.logging import storage_logger


LANGUAGES = ("en", "ht")

AUDIO_SIDECAR_SUFFIX = ".json"
PAIR_SUFFIX = ".pair.json"

PathLike = Union[str, Path]


def ensure_directory(directory: PathLike) -> Path:
    """
    确保目录存在（包括父目录）

    创建失败时 OSError 直接抛给调用方
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def extension_for_content_type(content_type: str = None) -> str:
    """根据 Content-Type 推断文件扩展名，不认识的类型一律 .bin"""
    t = str(content_type or "").lower()
    if "audio/webm" in t:
        return ".webm"
    if "audio/wav" in t:
        return ".wav"
    if "audio/mpeg" in t or "audio/mp3" in t:
        return ".mp3"
    if "audio/ogg" in t:
        return ".ogg"
    return ".bin"


def codec_for_extension(extension: str) -> str:
    """根据扩展名推断编码"""
    return {
        ".wav": "pcm_s16le",
        ".webm": "opus",
    }.get(extension.lower(), "unknown")


async def atomic_write_bytes(path: PathLike, content: bytes) -> Path:
    """先写临时文件再重命名，读取方不会看到写了一半的文件"""
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(content)
        await aiofiles.os.replace(tmp_path, path)
    except OSError:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            storage_logger.warning(f"Could not remove temp file {tmp_path}: {cleanup_error}")
        raise
    return path


async def atomic_write_json(path: PathLike, data: Any) -> Path:
    """以缩进JSON格式原子写入"""
    content = json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")
    return await atomic_write_bytes(path, content)


class RecordFile(NamedTuple):
    """待读取的元数据文件"""
    path: Path
    mtime: float


def scan_record_files(directory: PathLike, predicate: Callable[[str], bool]) -> List[RecordFile]:
    """
    扫描目录中符合条件的元数据文件

    Args:
        directory: 扫描目录，不存在时视为空
        predicate: 文件名过滤函数

    Returns:
        List[RecordFile]: 文件路径和修改时间
    """
    found = []
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        return found

    for entry in entries:
        name = entry.name
        if name.startswith(".") or not predicate(name):
            continue
        try:
            if not entry.is_file():
                continue
            mtime = entry.stat().st_mtime
        except FileNotFoundError:
            # 扫描过程中被删除
            continue
        found.append(RecordFile(Path(entry.path), mtime))

    return found


def is_audio_sidecar(name: str) -> bool:
    return name.endswith(AUDIO_SIDECAR_SUFFIX) and not name.endswith(PAIR_SUFFIX)


def is_pair_record(name: str) -> bool:
    return name.endswith(PAIR_SUFFIX)


class SampleStore:
    """样本存储布局"""

    def __init__(self, base_path: PathLike):
        self.base_path = Path(base_path)

    @property
    def audio_root(self) -> Path:
        return self.base_path / "audio"

    @property
    def pairs_dir(self) -> Path:
        return self.base_path / "pairs"

    def audio_dir(self, lang: str) -> Path:
        """获取语言分区目录"""
        if lang not in LANGUAGES:
            raise ValueError(f"Unknown language partition: {lang}")
        return self.audio_root / lang

    def audio_blob_path(self, lang: str, audio_id: str, extension: str) -> Path:
        return self.audio_dir(lang) / f"{audio_id}{extension}"

    def audio_sidecar_path(self, lang: str, audio_id: str) -> Path:
        return self.audio_dir(lang) / f"{audio_id}{AUDIO_SIDECAR_SUFFIX}"

    def pair_path(self, sample_id: str) -> Path:
        return self.pairs_dir / f"{sample_id}{PAIR_SUFFIX}"

    def ensure_layout(self):
        """创建所有分区目录"""
        for lang in LANGUAGES:
            ensure_directory(self.audio_dir(lang))
        ensure_directory(self.pairs_dir)

    async def scan_audio_sidecars(self) -> List[RecordFile]:
        """扫描两个语言分区的音频元数据"""
        loop = asyncio.get_running_loop()
        found = []
        for lang in LANGUAGES:
            found.extend(await loop.run_in_executor(
                None, scan_record_files, self.audio_dir(lang), is_audio_sidecar
            ))
        return found

    async def scan_pair_records(self) -> List[RecordFile]:
        """扫描样本对记录"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, scan_record_files, self.pairs_dir, is_pair_record
        )

    async def read_json(self, path: PathLike) -> Any:
        """读取JSON文件"""
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return json.loads(await f.read())

    async def audio_exists(self, lang: str, audio_id: str) -> bool:
        """音频元数据是否存在于指定语言分区"""
        if not audio_id or "/" in audio_id or "\\" in audio_id or audio_id.startswith("."):
            return False
        return await aiofiles.os.path.exists(self.audio_sidecar_path(lang, audio_id))
