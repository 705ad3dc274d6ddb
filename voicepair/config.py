"""
应用配置管理
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from pathlib import Path


class Settings(BaseSettings):
    """应用配置"""

    # 基本配置
    app_name: str = "translator-voice-en-ht"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, description="调试模式")
    node_env: str = Field(default="development", description="运行环境 (development / production)")

    # 服务器配置
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8080, description="服务器端口")

    # 文件存储配置
    data_dir: Path = Field(default=Path("data"), description="数据根目录")
    public_dir: Path = Field(default=Path("public"), description="静态资源目录")
    max_file_size: int = Field(default=10 * 1024 * 1024, description="最大音频大小(10MB)")
    max_json_size: int = Field(default=64 * 1024, description="JSON请求体上限(64KB)")
    list_limit: int = Field(default=50, description="列表最多返回条数", ge=1)
    verify_audio_refs: bool = Field(default=False, description="关联样本时校验音频ID是否存在")

    # 日志配置
    log_dir: Path = Field(default=Path("logs"), description="日志目录")
    log_to_file: bool = Field(default=True, description="是否写入日志文件")

    # CORS配置
    cors_production_origin: str = Field(
        default="https://voicepair.example.org",
        description="生产环境允许的跨域源"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def allowed_origin(self) -> str:
        """生产环境只允许固定源，其余环境允许任意源"""
        return self.cors_production_origin if self.is_production else "*"


# 创建全局配置实例
settings = Settings()
