"""
音频记录的Pydantic模式
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime


class AudioRecord(BaseModel):
    """音频元数据记录，与音频文件同名保存为 <id>.json"""
    kind: Literal["audio"] = Field(default="audio", description="记录类型")
    id: str = Field(..., description="音频ID")
    lang: Literal["en", "ht"] = Field(..., description="语言分区")
    created_at: datetime = Field(..., alias="createdAt", description="创建时间")
    content_type: str = Field(..., alias="contentType", description="上传时的Content-Type")
    byte_size: int = Field(..., alias="bytes", ge=0, description="音频字节数")
    audio_file: str = Field(..., alias="audioFile", description="音频文件名")
    transcript: str = Field(..., description="转录文本(目前为占位)")
    codec: str = Field(..., description="由扩展名推断的编码")
    sample_rate: Optional[int] = Field(None, alias="sr", description="采样率")
    duration_seconds: Optional[float] = Field(None, alias="duration_s", description="时长(秒)")
    domain_tags: List[str] = Field(default_factory=list, alias="domain", description="领域标签")
    ip: Optional[str] = Field(None, description="上传者IP")
    user_agent: Optional[str] = Field(None, alias="userAgent", description="上传者User-Agent")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("domain_tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[str]) -> List[str]:
        return list(dict.fromkeys(tags))

    def to_json(self) -> dict:
        """按存储/响应格式导出"""
        return self.model_dump(mode="json", by_alias=True)
