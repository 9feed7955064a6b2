#!/usr/bin/env python3
"""
urdf-inertia 主入口
逐个处理命令行参数: 数值 → 总质量, 关节文件 → 关节偏移, 其他 → 网格文件;
全部网格测量完后按体积分配质量并输出 URDF 片段.
"""
import argparse
import math
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from omegaconf import DictConfig
from omegaconf.errors import OmegaConfBaseException

from .core.config import ConfigManager
from .core.errors import ConfigError, UrdfInertiaError, UsageError
from .core.io import load_mesh, parse_joint_file
from .core.logger import configure_logging, create_progress, get_logger
from .geometry.inertia import measure_mesh
from .simulation.normalizer import NormalizedLink, normalize
from .simulation.urdf_builder import format_report, save_urdf

logger = get_logger(__name__)


class ArgumentKind(Enum):
    MASS_OVERRIDE = "mass"
    JOINT_FILE = "joints"
    MESH_FILE = "mesh"


@dataclass(frozen=True)
class Argument:
    """分类后的命令行参数"""
    kind: ArgumentKind
    token: str
    mass: Optional[float] = None


def classify_argument(token: str, joint_extensions: Iterable[str] = (".txt",)) -> Argument:
    """
    按顺序尝试: 正数 → 总质量; 关节文件后缀 → 关节文件; 其他 → 网格文件

    Args:
        token: 命令行参数
        joint_extensions: 关节文件后缀

    Returns:
        Argument
    """
    value = None
    # float() 也接受 "1_000" 和首尾空白, 这些不算质量
    if "_" not in token and token == token.strip():
        try:
            value = float(token)
        except ValueError:
            pass
    if value is not None and math.isfinite(value) and value > 0:
        return Argument(ArgumentKind.MASS_OVERRIDE, token, value)

    lowered = token.lower()
    if any(lowered.endswith(ext.lower()) for ext in joint_extensions):
        return Argument(ArgumentKind.JOINT_FILE, token)

    return Argument(ArgumentKind.MESH_FILE, token)


def run(tokens: Sequence[str], conf: DictConfig) -> Tuple[List[NormalizedLink], float]:
    """
    顺序处理所有参数并归一化

    Args:
        tokens: 命令行参数 (顺序即 link 顺序)
        conf: 配置

    Returns:
        (归一化后的 link 列表, 总质量)
    """
    arguments = [classify_argument(t, conf.joints.extensions) for t in tokens]
    mesh_count = sum(a.kind is ArgumentKind.MESH_FILE for a in arguments)
    if mesh_count == 0:
        raise UsageError("No mesh file provided!")

    target_mass = float(conf.mass.default)
    joints = []
    records = []
    volume = 0.0

    with create_progress() as progress:
        task = progress.add_task("Measuring meshes", total=mesh_count)
        for arg in arguments:
            if arg.kind is ArgumentKind.MASS_OVERRIDE:
                target_mass = arg.mass
                logger.info(f"Overall mass is: {target_mass:f} kg")
                continue

            if arg.kind is ArgumentKind.JOINT_FILE:
                # 新的关节文件替换之前读到的
                joints = parse_joint_file(arg.token,
                                          fields=conf.joints.fields,
                                          max_line_length=conf.joints.max_line_length)
                continue

            progress.update(task, description=f"Measuring {arg.token}")
            mesh = load_mesh(arg.token, scene_extensions=conf.mesh.scene_extensions)
            record = measure_mesh(mesh, name=arg.token, volume_epsilon=conf.mesh.volume_epsilon)
            del mesh

            logger.info(f"Volume: {volume:14.11f} + {record.volume:14.11f} = {volume + record.volume:14.11f}")
            volume += record.volume
            records.append(record)
            progress.advance(task)

    links = normalize(records, target_mass, joints)
    return links, target_mass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="urdf-inertia",
        description="Compute URDF inertial data for closed triangle meshes. "
                    "A positive number sets the overall mass, *.txt files give joint offsets, "
                    "everything else is read as a mesh (one link per mesh).")
    parser.add_argument("tokens", nargs="*", metavar="MASS|JOINTS.txt|MESH",
                        help="overall mass, joint offset file or mesh file, in link order")
    parser.add_argument("--config", default=None, help="YAML config merged over the defaults")
    parser.add_argument("--output", default=None, help="also write the URDF fragment to this file")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="override a config value, e.g. --set report.uri_prefix=package://robot/")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        conf = ConfigManager.from_dotlist(ConfigManager.load(args.config), args.overrides)
        if args.log_level:
            conf.logging.level = args.log_level
        if args.output:
            conf.report.output = args.output

        if not ConfigManager.validate_config(conf):
            raise ConfigError("Invalid configuration")
        configure_logging(conf.logging.level, conf.logging.file)

        links, target_mass = run(args.tokens, conf)

        # 先写文件, 成功后才输出到 stdout
        report = format_report(links, target_mass, uri_prefix=conf.report.uri_prefix)
        if conf.report.output:
            save_urdf(report, conf.report.output)
    except (UrdfInertiaError, OmegaConfBaseException, OSError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    sys.stdout.write(report)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
