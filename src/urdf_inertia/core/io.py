"""
输入输出模块
负责关节偏移文件解析与网格文件导入
"""

import re
from pathlib import Path
from typing import Iterable, List, NamedTuple, Union

import numpy as np
import trimesh

from .errors import JointFileError, MeshImportError
from .logger import get_logger

logger = get_logger(__name__)

# 与 C atof 一致: 只取最长的数字前缀
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class JointOffset(NamedTuple):
    """关节偏移记录: 平移 x y z + 3 个保留 (旋转) 分量"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    r0: float = 0.0
    r1: float = 0.0
    r2: float = 0.0

    @property
    def translation(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


def parse_number(token: str) -> float:
    """解析数字前缀, 无法解析时返回 0.0"""
    match = _NUMBER_PREFIX.match(token.strip())
    if match is None:
        return 0.0
    return float(match.group(0))


def parse_joint_line(line: str, fields: int = 6) -> JointOffset:
    """
    解析一行关节记录

    Args:
        line: 文本行 (空格分隔)
        fields: 期望字段数, 缺失的尾部字段补零

    Returns:
        JointOffset
    """
    tokens = line.split()
    if len(tokens) > fields:
        logger.warning(f"Joint record has {len(tokens)} fields, ignoring all after the first {fields}: '{line}'")
        tokens = tokens[:fields]

    values = [parse_number(t) for t in tokens]
    values += [0.0] * (len(JointOffset._fields) - len(values))
    return JointOffset(*values[:len(JointOffset._fields)])


def parse_joint_file(path: Union[str, Path],
                     fields: int = 6,
                     max_line_length: int = 31) -> List[JointOffset]:
    """
    读取关节偏移文件, 每个非空行一条记录, 顺序即文件行序

    Args:
        path: 文件路径
        fields: 每条记录字段数
        max_line_length: 每行最多读取的字符数, 超出部分被截断

    Returns:
        JointOffset 列表
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise JointFileError(path, e.strerror or str(e)) from e

    logger.info(f"Read file '{path}' as joint transformation info.")

    joints = []
    for lineno, line in enumerate(lines, start=1):
        if len(line) > max_line_length:
            logger.warning(f"{path.name}:{lineno}: line longer than {max_line_length} characters, truncated")
            line = line[:max_line_length]
        if not line.strip():
            continue
        joint = parse_joint_line(line, fields)
        logger.debug(f"{path.name}:{lineno}: {tuple(joint)}")
        joints.append(joint)

    logger.info(f"Parsed {len(joints)} joint records from {path.name}")
    return joints


def _load_scene_mesh(path: Path) -> trimesh.Trimesh:
    """打包场景格式 (如 COLLADA): 展开场景图变换后合并为单个网格"""
    scene = trimesh.load(str(path), force='scene')
    names = list(scene.geometry.keys())
    logger.info(f"Scene {path.name}: {len(names)} geometries {names}, units={scene.units}")

    geometries = [g for g in scene.dump() if isinstance(g, trimesh.Trimesh)]
    if not geometries:
        raise MeshImportError(path, "scene contains no triangle geometry")
    return trimesh.util.concatenate(geometries)


def load_mesh(path: Union[str, Path], scene_extensions: Iterable[str] = (".dae",)) -> trimesh.Trimesh:
    """
    导入网格文件

    Args:
        path: 网格文件路径
        scene_extensions: 使用场景导入器的后缀

    Returns:
        trimesh.Trimesh
    """
    path = Path(path)
    if not path.is_file():
        raise MeshImportError(path, "file not found")

    scene_extensions = {ext.lower() for ext in scene_extensions}
    try:
        if path.suffix.lower() in scene_extensions:
            mesh = _load_scene_mesh(path)
        else:
            mesh = trimesh.load(str(path), force='mesh')
    except MeshImportError:
        raise
    except Exception as e:
        raise MeshImportError(path, str(e) or type(e).__name__) from e

    if not isinstance(mesh, trimesh.Trimesh):
        raise MeshImportError(path, f"loaded {type(mesh).__name__}, expected a triangle mesh")
    if len(mesh.faces) == 0:
        raise MeshImportError(path, "mesh has no faces")

    # 开放或朝向不一致的网格仍然计算, 结果只是没有物理意义
    if not mesh.is_watertight:
        logger.warning(f"{path.name} is not watertight, volume and inertia may be meaningless")
    elif not mesh.is_winding_consistent:
        logger.warning(f"{path.name} has inconsistent face winding, volume and inertia may be meaningless")

    logger.info(f"Loaded {path.name}: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
    return mesh
