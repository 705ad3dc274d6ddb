"""
VoicePair - 英语/海地克里奥尔语语音样本采集服务
"""

__version__ = "0.1.0"
