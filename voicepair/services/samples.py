"""
样本列表服务
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as SchemaValidationError

from voicepair.core.exceptions import StorageError
from voicepair.core.logging import service_logger
from voicepair.core.storage import RecordFile, SampleStore, is_pair_record
from voicepair.schemas.audio import AudioRecord
from voicepair.schemas.pair import PairRecord


SAMPLE_KINDS = ("audio", "pair", "all")


def normalize_kind(kind: Optional[str]) -> str:
    """未知的 kind 一律按 all 处理"""
    kind = (kind or "all").strip().lower()
    return kind if kind in SAMPLE_KINDS else "all"


class SampleService:
    """样本列表服务"""

    def __init__(self, store: SampleStore, limit: int = 50):
        self.store = store
        self.limit = limit

    async def _collect(self, kind: str) -> List[RecordFile]:
        files = []
        try:
            if kind in ("audio", "all"):
                files.extend(await self.store.scan_audio_sidecars())
            if kind in ("pair", "all"):
                files.extend(await self.store.scan_pair_records())
        except OSError as e:
            service_logger.error(f"Failed to scan sample directories: {e}")
            raise StorageError("List failed", details=str(e))
        return files

    async def load_record(self, record_file: RecordFile) -> Optional[Dict[str, Any]]:
        """读取并校验单条记录，失败时返回None"""
        model = PairRecord if is_pair_record(record_file.path.name) else AudioRecord
        try:
            data = await self.store.read_json(record_file.path)
            return model.model_validate(data).to_json()
        except (OSError, ValueError, SchemaValidationError) as e:
            service_logger.debug(f"Skipping unreadable record {record_file.path}: {e}")
            return None

    async def list_samples(self, kind: Optional[str] = None) -> Tuple[str, List[Dict[str, Any]]]:
        """
        列出最近的样本

        Args:
            kind: audio / pair / all

        Returns:
            Tuple[str, List[Dict[str, Any]]]: (实际使用的kind, 按时间倒序的记录)
        """
        kind = normalize_kind(kind)
        files = await self._collect(kind)

        # 按修改时间倒序，文件名保证顺序稳定
        files.sort(key=lambda f: (f.mtime, f.path.name), reverse=True)

        items = []
        for record_file in files[:self.limit]:
            item = await self.load_record(record_file)
            if item is not None:
                items.append(item)

        return kind, items
