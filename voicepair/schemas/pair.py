"""
样本对相关的Pydantic模式
"""

from pydantic import BaseModel, Field
from typing import Literal
from datetime import datetime


class PairSide(BaseModel):
    """样本对中单一语言的一侧"""
    text: str = Field(default="", description="文本")
    audio_ref: str = Field(..., alias="audioRef", description="引用的音频ID")

    class Config:
        populate_by_name = True
        frozen = True


class PairRecord(BaseModel):
    """英语/海地克里奥尔语样本对，保存为 <sampleId>.pair.json"""
    kind: Literal["pair"] = Field(default="pair", description="记录类型")
    sample_id: str = Field(..., alias="sampleId", description="样本ID")
    created_at: datetime = Field(..., alias="createdAt", description="创建时间")
    term: str = Field(..., description="词条")
    category: str = Field(..., description="分类，如 medical / insurance")
    annotator: str = Field(default="anonymous", description="标注人")
    consent: Literal[True] = Field(default=True, description="录音者同意")
    en: PairSide = Field(..., description="英语侧")
    ht: PairSide = Field(..., description="海地克里奥尔语侧")

    class Config:
        populate_by_name = True
        frozen = True

    def to_json(self) -> dict:
        """按存储/响应格式导出"""
        return self.model_dump(mode="json", by_alias=True)
