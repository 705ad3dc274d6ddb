"""
音频上传API端点
"""

from fastapi import APIRouter, Depends, Path, Request
from typing import Any, Dict, Optional

from voicepair.api.deps import get_audio_service, get_declared_length
from voicepair.services.audio import AudioService, read_limited_body, validate_language


router = APIRouter()


@router.post("/{lang}", summary="上传音频并生成转录")
async def upload_audio(
    request: Request,
    lang: str = Path(..., description="语言代码: en 或 ht"),
    declared_length: Optional[int] = Depends(get_declared_length),
    audio_service: AudioService = Depends(get_audio_service)
) -> Dict[str, Any]:
    """
    上传原始音频字节

    - **lang**: 语言分区，en 或 ht
    - 请求体为原始音频，Content-Type 决定保存的扩展名和编码
    """
    # 语言不合法时不读取请求体
    validate_language(lang)

    body = await read_limited_body(
        request.stream(),
        audio_service.max_file_size,
        declared_length
    )

    record = await audio_service.ingest(
        lang,
        request.headers.get("content-type"),
        body,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent", "")
    )

    return {"ok": True, **record.to_json()}
