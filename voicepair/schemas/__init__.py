"""
数据模式包
"""

from .audio import AudioRecord
from .pair import PairRecord, PairSide

__all__ = [
    "AudioRecord",
    "PairRecord",
    "PairSide",
]
