"""
语音转录接口

真实的ASR服务尚未接入，上传流程只依赖 Transcriber 接口
"""

from abc import ABC, abstractmethod


STUB_TRANSCRIPTS = {
    "en": "Hello World (ASR stub)",
    "ht": "Bonjou mond (ASR stub)",
}


class Transcriber(ABC):
    """语音转录服务抽象基类"""

    @abstractmethod
    async def transcribe(self, audio: bytes, lang: str) -> str:
        """
        转录音频

        Args:
            audio: 原始音频字节
            lang: 语言代码，'en' 或 'ht'

        Returns:
            str: 转录文本
        """
        pass


class StubTranscriber(Transcriber):
    """占位转录器，按语言返回固定文本"""

    async def transcribe(self, audio: bytes, lang: str) -> str:
        return STUB_TRANSCRIPTS[lang]


_transcriber: Transcriber = StubTranscriber()


def get_transcriber() -> Transcriber:
    """获取转录器实例"""
    return _transcriber
