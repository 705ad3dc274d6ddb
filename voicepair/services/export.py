"""
训练数据导出
"""

import csv
import io
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from voicepair.core.exceptions import StorageError, ValidationError
from voicepair.core.logging import service_logger
from voicepair.core.storage import SampleStore
from voicepair.schemas.audio import AudioRecord
from voicepair.schemas.pair import PairRecord


class ExportFormat:
    JSON = "json"
    JSONL = "jsonl"
    CSV = "csv"

    ALL = (JSON, JSONL, CSV)


CONTENT_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.JSONL: "application/x-jsonlines",
    ExportFormat.CSV: "text/csv",
}

CSV_HEADERS = [
    "sampleId", "createdAt", "term", "category", "annotator",
    "en_text", "en_audioId", "en_audioFile", "en_duration",
    "ht_text", "ht_audioId", "ht_audioFile", "ht_duration",
]


def parse_since(since: Optional[str]) -> Optional[datetime]:
    """解析ISO时间，缺少时区时按UTC处理"""
    if not since:
        return None
    try:
        parsed = datetime.fromisoformat(since.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid 'since' timestamp: {since}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TrainingDataExporter:
    """训练数据导出器"""

    def __init__(self, store: SampleStore):
        self.store = store

    async def _load_pairs(self) -> List[PairRecord]:
        try:
            files = await self.store.scan_pair_records()
        except OSError as e:
            raise StorageError("Export failed", details=str(e))

        pairs = []
        for record_file in files:
            try:
                record = PairRecord.model_validate(await self.store.read_json(record_file.path))
            except (OSError, ValueError) as e:
                service_logger.debug(f"Skipping unreadable pair {record_file.path}: {e}")
                continue
            # 无时区的时间按UTC处理，与 parse_since 一致
            if record.created_at.tzinfo is None:
                record = record.model_copy(
                    update={"created_at": record.created_at.replace(tzinfo=timezone.utc)}
                )
            pairs.append(record)
        return pairs

    async def _load_audio(self, lang: str, audio_id: str) -> Optional[AudioRecord]:
        if not await self.store.audio_exists(lang, audio_id):
            return None
        try:
            return AudioRecord.model_validate(
                await self.store.read_json(self.store.audio_sidecar_path(lang, audio_id))
            )
        except (OSError, ValueError):
            return None

    async def _export_side(self, lang: str, side, include_audio: bool) -> Dict[str, Any]:
        data = {"text": side.text, "audioId": side.audio_ref}
        if include_audio:
            audio = await self._load_audio(lang, side.audio_ref)
            data["audioFile"] = audio.audio_file if audio else None
            data["duration_s"] = audio.duration_seconds if audio else None
        return data

    async def collect(
        self,
        category: Optional[str] = None,
        since: Optional[datetime] = None,
        include_audio: bool = False
    ) -> List[Dict[str, Any]]:
        """
        收集导出数据

        Args:
            category: 分类筛选
            since: 只导出该时间之后创建的样本
            include_audio: 是否附带音频文件信息

        Returns:
            List[Dict[str, Any]]: 按创建时间正序的样本
        """
        pairs = await self._load_pairs()
        if category:
            pairs = [p for p in pairs if p.category == category]
        if since:
            pairs = [p for p in pairs if p.created_at >= since]
        pairs.sort(key=lambda p: (p.created_at, p.sample_id))

        rows = []
        for pair in pairs:
            rows.append({
                "sampleId": pair.sample_id,
                "createdAt": pair.created_at.isoformat(),
                "term": pair.term,
                "category": pair.category,
                "annotator": pair.annotator,
                "en": await self._export_side("en", pair.en, include_audio),
                "ht": await self._export_side("ht", pair.ht, include_audio),
            })
        return rows

    def render(self, rows: List[Dict[str, Any]], format: str,
               category: Optional[str] = None, include_audio: bool = False) -> str:
        """按格式输出导出内容"""
        if format == ExportFormat.JSONL:
            return "\n".join(json.dumps(row, ensure_ascii=False) for row in rows)

        if format == ExportFormat.CSV:
            output = io.StringIO()
            writer = csv.writer(output, lineterminator="\n")
            writer.writerow(CSV_HEADERS)
            for row in rows:
                record = [row["sampleId"], row["createdAt"], row["term"], row["category"], row["annotator"]]
                for lang in ("en", "ht"):
                    side = row[lang]
                    record.extend([
                        side["text"],
                        side["audioId"],
                        side.get("audioFile") or "",
                        "" if side.get("duration_s") is None else side["duration_s"],
                    ])
                writer.writerow(record)
            return output.getvalue()

        return json.dumps({
            "metadata": {
                "exportedAt": datetime.now(timezone.utc).isoformat(),
                "totalPairs": len(rows),
                "category": category or "all",
                "includeAudio": include_audio,
                "format": ExportFormat.JSON,
            },
            "data": rows,
        }, ensure_ascii=False, indent=2)

    async def export(
        self,
        format: str = ExportFormat.JSON,
        category: Optional[str] = None,
        since: Optional[str] = None,
        include_audio: bool = False
    ) -> Dict[str, Any]:
        """
        导出训练数据

        Returns:
            Dict[str, Any]: body / content_type / filename / count
        """
        format = (format or ExportFormat.JSON).lower()
        if format not in ExportFormat.ALL:
            raise ValidationError(
                f"Unsupported export format: {format}",
                details={"allowed": list(ExportFormat.ALL)}
            )

        rows = await self.collect(category, parse_since(since), include_audio)
        body = self.render(rows, format, category, include_audio)
        filename = f"training-data-{datetime.now(timezone.utc).date().isoformat()}.{format}"

        service_logger.info(f"Exported {len(rows)} pairs as {format}")
        return {
            "body": body,
            "content_type": CONTENT_TYPES[format],
            "filename": filename,
            "count": len(rows),
        }
