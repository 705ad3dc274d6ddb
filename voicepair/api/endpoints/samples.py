"""
样本相关API端点
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from typing import Any, Dict, Optional

from voicepair.api.deps import (
    get_declared_length,
    get_exporter,
    get_pair_service,
    get_sample_service,
    get_settings,
)
from voicepair.config import Settings
from voicepair.services.audio import read_limited_body
from voicepair.services.export import ExportFormat, TrainingDataExporter
from voicepair.services.pairs import PairService, parse_link_payload
from voicepair.services.samples import SampleService


router = APIRouter()


@router.post("/link", summary="关联英语和海地克里奥尔语音频")
async def link_samples(
    request: Request,
    declared_length: Optional[int] = Depends(get_declared_length),
    settings: Settings = Depends(get_settings),
    pair_service: PairService = Depends(get_pair_service)
) -> Dict[str, Any]:
    """
    创建样本对

    请求体JSON:
    - **term**, **category**, **enAudioId**, **htAudioId**: 必填
    - **enText**: 默认为 term
    - **htText**: 默认为空
    - **annotator**: 默认为 anonymous
    - **consent**: 必须为 true
    """
    body = await read_limited_body(request.stream(), settings.max_json_size, declared_length)
    payload = parse_link_payload(body)
    record = await pair_service.link(payload)

    return {
        "ok": True,
        "sampleId": record.sample_id,
        "record": record.to_json()
    }


@router.get("", summary="列出最近的样本")
async def list_samples(
    kind: Optional[str] = Query("all", description="audio / pair / all，其他值按 all 处理"),
    sample_service: SampleService = Depends(get_sample_service)
) -> Dict[str, Any]:
    """按修改时间倒序返回最近的记录"""
    kind, items = await sample_service.list_samples(kind)

    return {
        "ok": True,
        "count": len(items),
        "kind": kind,
        "items": items
    }


@router.get("/export", summary="导出训练数据")
async def export_samples(
    format: str = Query(ExportFormat.JSON, description="json / jsonl / csv"),
    category: Optional[str] = Query(None, description="分类筛选"),
    since: Optional[str] = Query(None, description="ISO时间，只导出之后创建的样本"),
    include_audio: bool = Query(False, alias="includeAudio", description="附带音频文件信息"),
    exporter: TrainingDataExporter = Depends(get_exporter)
) -> Response:
    """导出所有样本对，作为附件下载"""
    result = await exporter.export(format, category, since, include_audio)

    return Response(
        content=result["body"],
        media_type=result["content_type"],
        headers={
            "Content-Disposition": f'attachment; filename="{result["filename"]}"',
            "X-Total-Pairs": str(result["count"])
        }
    )
