"""
统一日志管理模块
使用 Rich 提供美观的控制台输出和进度条

控制台输出走 stderr, stdout 只留给 URDF 报告.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

PACKAGE_LOGGER = "urdf_inertia"


class Logger:
    """包级日志器: Rich 控制台 (stderr) + 可选日志文件"""

    def __init__(self, name: str = PACKAGE_LOGGER, level: str = "INFO", log_file: Optional[str] = None):
        self.console = Console(stderr=True)
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(level).upper()))

        # 重新配置时替换旧的处理器
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        self.logger.addHandler(RichHandler(console=self.console, show_path=False, markup=False))
        if log_file:
            self.logger.addHandler(self._file_handler(Path(log_file)))

    @staticmethod
    def _file_handler(path: Path) -> logging.FileHandler:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        return handler

    def get_logger(self) -> logging.Logger:
        return self.logger

    def create_progress(self) -> Progress:
        """进度条与日志共用同一个控制台, 结束后自动清除"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True
        )


# 全局日志实例
_global_logger = None


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    获取日志器

    模块内使用 get_logger(__name__), 子 logger 会传播到包级 logger 的处理器.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = Logger()
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """按配置重新初始化包级 logger (级别 / 日志文件)"""
    global _global_logger
    _global_logger = Logger(PACKAGE_LOGGER, level, log_file)
    return _global_logger.get_logger()


def create_progress() -> Progress:
    """创建进度条"""
    global _global_logger
    if _global_logger is None:
        _global_logger = Logger()
    return _global_logger.create_progress()
