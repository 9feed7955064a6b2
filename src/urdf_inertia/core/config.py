"""
配置管理系统
使用 OmegaConf 加载默认配置, 合并用户配置与命令行覆盖项
"""
import logging
from omegaconf import OmegaConf, DictConfig
from pathlib import Path
from typing import Iterable, Optional, Union

from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


class ConfigManager:
    """配置管理器 - 负责加载、验证和导出配置"""

    @staticmethod
    def load(config_path: Optional[Union[str, Path]] = None) -> DictConfig:
        """
        加载默认配置, 如果给出用户配置文件则合并到默认配置之上

        Args:
            config_path: 用户配置文件路径 (可选)

        Returns:
            OmegaConf 配置对象
        """
        conf = OmegaConf.load(DEFAULT_CONFIG_PATH)

        if config_path is not None:
            if not Path(config_path).exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
            conf = ConfigManager.merge_configs(conf, OmegaConf.load(config_path))
            logger.debug(f"Merged user config {config_path}")

        return conf

    @staticmethod
    def from_dotlist(conf: DictConfig, overrides: Iterable[str]) -> DictConfig:
        """应用 key=value 形式的覆盖项"""
        overrides = list(overrides)
        if not overrides:
            return conf
        return ConfigManager.merge_configs(conf, OmegaConf.from_dotlist(overrides))

    @staticmethod
    def validate_config(conf: DictConfig) -> bool:
        """
        验证配置文件的正确性

        Args:
            conf: 配置对象

        Returns:
            验证是否通过
        """
        required_fields = [
            "mass.default",
            "joints.extensions",
            "joints.fields",
            "joints.max_line_length",
            "mesh.scene_extensions",
            "report.uri_prefix",
            "logging.level",
        ]

        for field in required_fields:
            if OmegaConf.select(conf, field) is None:
                logger.error(f"Config validation failed: missing field {field}")
                return False

        # 数值字段先检查类型, 否则比较会抛 TypeError
        numeric_fields = {
            "mass.default": (int, float),
            "joints.fields": (int,),
            "joints.max_line_length": (int,),
            "mesh.volume_epsilon": (int, float),
        }
        for field, types in numeric_fields.items():
            value = OmegaConf.select(conf, field, default=0)
            if isinstance(value, bool) or not isinstance(value, types):
                logger.error(f"Config validation failed: {field} must be a number, got {value!r}")
                return False

        # 验证数值范围
        if not conf.mass.default > 0:
            logger.error("Config validation failed: mass.default must be > 0")
            return False

        if conf.joints.fields < 3:
            logger.error("Config validation failed: joints.fields must be >= 3")
            return False

        if conf.joints.max_line_length <= 0:
            logger.error("Config validation failed: joints.max_line_length must be > 0")
            return False

        if not isinstance(logging.getLevelName(str(conf.logging.level).upper()), int):
            logger.error(f"Config validation failed: unknown logging.level {conf.logging.level}")
            return False

        if OmegaConf.select(conf, "mesh.volume_epsilon", default=0.0) < 0:
            logger.error("Config validation failed: mesh.volume_epsilon must be >= 0")
            return False

        return True

    @staticmethod
    def merge_configs(base_config: DictConfig, override_config: DictConfig) -> DictConfig:
        """
        合并两个配置对象，后面的覆盖前面的

        Args:
            base_config: 基础配置
            override_config: 覆盖配置

        Returns:
            合并后的配置
        """
        return OmegaConf.merge(base_config, override_config)

    @staticmethod
    def save_config(conf: DictConfig, path: Union[str, Path]):
        """保存配置到文件"""
        OmegaConf.save(conf, path)
