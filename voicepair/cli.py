"""
命令行接口 - 启动服务和导出训练数据
"""

import asyncio
import click
import uvicorn
from pathlib import Path
from typing import Optional

from voicepair import __version__
from voicepair.config import settings
from voicepair.core.exceptions import VoicePairException
from voicepair.core.logging import setup_logging, api_logger
from voicepair.core.storage import SampleStore
from voicepair.services.export import ExportFormat, TrainingDataExporter


@click.group()
@click.version_option(version=__version__)
def main():
    """VoicePair - 英语/海地克里奥尔语语音样本采集"""
    pass


@main.command()
@click.option('--host', default=None, help='服务器地址')
@click.option('--port', default=None, type=int, help='服务器端口')
@click.option('--reload', is_flag=True, help='开启自动重载')
@click.option('--log-level', default='info',
              type=click.Choice(['debug', 'info', 'warning', 'error', 'critical']),
              help='日志级别')
def server(host: Optional[str], port: Optional[int], reload: bool, log_level: str):
    """启动API服务器"""
    host = host or settings.host
    port = port or settings.port

    setup_logging(settings, level=log_level.upper())
    api_logger.info(f"启动服务器: {host}:{port}")

    uvicorn.run(
        "voicepair.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=True
    )


@main.command()
@click.option('--format', 'export_format', default=ExportFormat.JSON,
              type=click.Choice(list(ExportFormat.ALL)), help='导出格式')
@click.option('--category', default=None, help='分类筛选')
@click.option('--since', default=None, help='ISO时间，只导出之后创建的样本')
@click.option('--include-audio', is_flag=True, help='附带音频文件信息')
@click.option('--data-dir', default=None, type=click.Path(file_okay=False, path_type=Path),
              help='数据目录，默认使用配置')
@click.option('--output', '-o', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='输出文件，默认按日期命名')
def export(export_format: str, category: Optional[str], since: Optional[str],
           include_audio: bool, data_dir: Optional[Path], output: Optional[Path]):
    """导出样本对作为训练数据"""
    exporter = TrainingDataExporter(SampleStore(data_dir or settings.data_dir))

    try:
        result = asyncio.run(exporter.export(export_format, category, since, include_audio))
    except VoicePairException as e:
        raise click.ClickException(e.message)

    output = output or Path(result["filename"])
    output.write_text(result["body"], encoding="utf-8")
    click.echo(f"已导出 {result['count']} 条样本到 {output}")


if __name__ == "__main__":
    main()
