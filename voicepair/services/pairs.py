"""
样本对关联服务
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from voicepair.core.exceptions import (
    ParseError,
    StorageError,
    UnknownAudioReferenceError,
    ValidationError,
)
from voicepair.core.logging import service_logger
from voicepair.core.storage import SampleStore, atomic_write_json, ensure_directory
from voicepair.schemas.pair import PairRecord, PairSide


REQUIRED_FIELDS = ("term", "category", "enAudioId", "htAudioId")
OPTIONAL_TEXT_FIELDS = ("enText", "htText", "annotator")


def parse_link_payload(raw: bytes) -> Dict[str, Any]:
    """解析请求体，必须是JSON对象"""
    try:
        payload = json.loads(raw.decode("utf-8") if raw else "")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(details=str(e))

    if not isinstance(payload, dict):
        raise ParseError("Request body must be a JSON object")
    return payload


def _is_blank(value: Any) -> bool:
    # 非字符串的值视为缺失
    if not isinstance(value, str):
        return True
    return not value.strip()


def validate_link_payload(payload: Dict[str, Any]) -> None:
    """校验必填字段和同意标记，一次列出所有缺失或类型错误的字段"""
    missing = [field for field in REQUIRED_FIELDS if _is_blank(payload.get(field))]
    consent_given = payload.get("consent") is True

    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            missing_fields=missing,
            consent_required=not consent_given,
        )

    invalid = [
        field for field in OPTIONAL_TEXT_FIELDS
        if payload.get(field) is not None and not isinstance(payload[field], str)
    ]
    if invalid:
        raise ValidationError(
            f"Fields must be strings: {', '.join(invalid)}",
            consent_required=not consent_given,
            details={"invalidFields": invalid},
        )
    if not consent_given:
        raise ValidationError("Consent is required", consent_required=True)


class PairService:
    """样本对关联服务"""

    def __init__(self, store: SampleStore, verify_audio_refs: bool = False):
        self.store = store
        self.verify_audio_refs = verify_audio_refs

    async def _check_audio_refs(self, en_audio_id: str, ht_audio_id: str):
        unresolved = {}
        if not await self.store.audio_exists("en", en_audio_id):
            unresolved["enAudioId"] = en_audio_id
        if not await self.store.audio_exists("ht", ht_audio_id):
            unresolved["htAudioId"] = ht_audio_id
        if unresolved:
            raise UnknownAudioReferenceError(unresolved)

    async def link(self, payload: Dict[str, Any]) -> PairRecord:
        """
        创建样本对记录

        Args:
            payload: 已解析的请求JSON

        Returns:
            PairRecord: 已保存的样本对
        """
        validate_link_payload(payload)

        term = payload["term"]
        en_audio_id = payload["enAudioId"]
        ht_audio_id = payload["htAudioId"]

        if self.verify_audio_refs:
            await self._check_audio_refs(en_audio_id, ht_audio_id)

        annotator = payload.get("annotator")
        record = PairRecord(
            sample_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            term=term,
            category=payload["category"],
            annotator=annotator if not _is_blank(annotator) else "anonymous",
            consent=True,
            en=PairSide(text=payload.get("enText") or term, audio_ref=en_audio_id),
            ht=PairSide(text=payload.get("htText") or "", audio_ref=ht_audio_id),
        )

        try:
            ensure_directory(self.store.pairs_dir)
            await atomic_write_json(self.store.pair_path(record.sample_id), record.to_json())
        except OSError as e:
            service_logger.error(f"Failed to store pair {record.sample_id}: {e}")
            raise StorageError("Linking failed", details=str(e))

        service_logger.info(
            f"Linked pair {record.sample_id} term={term!r} en={en_audio_id} ht={ht_audio_id}"
        )
        return record
