"""
异常定义
所有异常对一次运行都是终止性的, 由 CLI 统一报告并返回非零退出码
"""
from pathlib import Path
from typing import Union


class UrdfInertiaError(Exception):
    """本工具所有错误的基类"""


class UsageError(UrdfInertiaError, ValueError):
    """命令行没有给出任何网格文件"""


class InputFileError(UrdfInertiaError, RuntimeError):
    """输入文件无法打开或解析"""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not open file '{self.path}': {reason}")


class MeshImportError(InputFileError):
    """网格文件导入失败"""


class JointFileError(InputFileError):
    """关节偏移文件读取失败"""


class DegenerateGeometryError(UrdfInertiaError, ValueError):
    """体积为零或非有限值, 质心/惯量无定义"""


class ConfigError(UrdfInertiaError, ValueError):
    """配置验证失败"""
