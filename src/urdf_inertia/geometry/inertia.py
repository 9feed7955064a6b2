"""
Inertia Module: Polyhedral Mass Properties
负责从封闭三角网格计算体积、质心和惯性张量 (单位密度)

每个三角面与原点构成一个有符号四面体, 利用散度定理把体积分化为面上的解析式,
一次性累加 1, x, y, z, x^2, y^2, z^2, xy, yz, zx 十个积分.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.errors import DegenerateGeometryError
from ..core.logger import get_logger

logger = get_logger(__name__)

# 十个积分的归一化系数
_INTEGRAL_COEFFS = np.array([1 / 6, 1 / 24, 1 / 24, 1 / 24, 1 / 60, 1 / 60, 1 / 60, 1 / 120, 1 / 120, 1 / 120])


def _freeze(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class InertiaResult:
    """单位密度下的质量属性"""
    signed_volume: float
    center_of_mass: np.ndarray  # (3,)
    inertia: np.ndarray         # (3, 3), 关于质心

    @property
    def volume(self) -> float:
        return abs(self.signed_volume)


@dataclass(frozen=True)
class LinkInertiaRecord:
    """单个 link 的测量结果, 创建后不再修改"""
    name: str
    volume: float
    center_of_mass: np.ndarray
    inertia: np.ndarray


def _subexpressions(w0: np.ndarray, w1: np.ndarray, w2: np.ndarray):
    """三角形某一坐标分量的多项式子表达式 (逐面向量化)"""
    temp0 = w0 + w1
    f1 = temp0 + w2
    temp1 = w0 * w0
    temp2 = temp1 + w1 * temp0
    f2 = temp2 + w2 * f1
    f3 = w0 * temp1 + w1 * temp2 + w2 * f2
    g0 = f2 + w0 * (f1 + w0)
    g1 = f2 + w1 * (f1 + w1)
    g2 = f2 + w2 * (f1 + w2)
    return f1, f2, f3, g0, g1, g2


def surface_integrals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    计算封闭曲面包围体的十个体积分 (有符号)

    Args:
        vertices: (N, 3) 顶点坐标
        faces: (M, 3) 顶点索引

    Returns:
        (10,) [1, x, y, z, x^2, y^2, z^2, xy, yz, zx] 的体积分
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    faces = np.asarray(faces, dtype=np.int64)

    if len(faces) == 0:
        return np.zeros(10)
    if faces.ndim != 2 or faces.shape[1] != 3:
        raise ValueError(f"Expected (M, 3) faces, got shape {faces.shape}")

    triangles = vertices[faces]  # (M, 3, 3)
    v0, v1, v2 = triangles[:, 0], triangles[:, 1], triangles[:, 2]

    # 未归一化的面法向, 长度为三角形面积的两倍
    normal = np.cross(v1 - v0, v2 - v0)

    fx = _subexpressions(v0[:, 0], v1[:, 0], v2[:, 0])
    fy = _subexpressions(v0[:, 1], v1[:, 1], v2[:, 1])
    fz = _subexpressions(v0[:, 2], v1[:, 2], v2[:, 2])

    f1x, f2x, f3x, g0x, g1x, g2x = fx
    _, f2y, f3y, g0y, g1y, g2y = fy
    _, f2z, f3z, g0z, g1z, g2z = fz

    nx, ny, nz = normal[:, 0], normal[:, 1], normal[:, 2]

    integrals = np.array([
        (nx * f1x).sum(),
        (nx * f2x).sum(),
        (ny * f2y).sum(),
        (nz * f2z).sum(),
        (nx * f3x).sum(),
        (ny * f3y).sum(),
        (nz * f3z).sum(),
        (nx * (v0[:, 1] * g0x + v1[:, 1] * g1x + v2[:, 1] * g2x)).sum(),
        (ny * (v0[:, 2] * g0y + v1[:, 2] * g1y + v2[:, 2] * g2y)).sum(),
        (nz * (v0[:, 0] * g0z + v1[:, 0] * g1z + v2[:, 0] * g2z)).sum(),
    ])
    return integrals * _INTEGRAL_COEFFS


def compute_inertia(vertices: np.ndarray,
                    faces: np.ndarray,
                    volume_epsilon: float = 1e-12) -> InertiaResult:
    """
    多面体积分: 体积、质心和关于质心的惯性张量 (单位密度)

    面朝内时有符号体积为负; 此时所有积分整体取反后再组装张量,
    因此 |V| 和质心处的张量与绕序无关.

    Args:
        vertices: (N, 3) 顶点坐标, 任意浮点精度, 内部统一使用 float64
        faces: (M, 3) 顶点索引
        volume_epsilon: 相对退化阈值, |V| <= eps * extent^3 视为零体积

    Returns:
        InertiaResult
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    integrals = surface_integrals(vertices, faces)

    signed_volume = float(integrals[0])
    used = vertices[np.unique(np.asarray(faces, dtype=np.int64))] if len(faces) else vertices[:0]
    extent = float(np.ptp(used, axis=0).max()) if len(used) else 0.0

    if not np.isfinite(signed_volume) or abs(signed_volume) <= volume_epsilon * extent ** 3:
        raise DegenerateGeometryError(
            f"Mesh volume {signed_volume!r} is zero or not finite (extent {extent:g}), "
            "center of mass and inertia are undefined")

    if signed_volume < 0:
        integrals = -integrals

    volume = integrals[0]
    com = integrals[1:4] / volume

    # 关于原点的惯性张量
    x2, y2, z2 = integrals[4:7]
    xy, yz, zx = integrals[7:10]
    ixx = y2 + z2
    iyy = z2 + x2
    izz = x2 + y2

    # 平行轴定理移到质心
    cx, cy, cz = com
    ixx -= volume * (cy * cy + cz * cz)
    iyy -= volume * (cz * cz + cx * cx)
    izz -= volume * (cx * cx + cy * cy)
    ixy = -(xy - volume * cx * cy)
    iyz = -(yz - volume * cy * cz)
    ixz = -(zx - volume * cz * cx)

    inertia = np.array([
        [ixx, ixy, ixz],
        [ixy, iyy, iyz],
        [ixz, iyz, izz],
    ])

    return InertiaResult(
        signed_volume=signed_volume,
        center_of_mass=_freeze(com),
        inertia=_freeze(inertia),
    )


def measure_mesh(mesh, name: Optional[str] = None, volume_epsilon: float = 1e-12) -> LinkInertiaRecord:
    """
    测量 trimesh.Trimesh (只使用顶点和面)

    Args:
        mesh: 任何带 vertices / faces 属性的网格对象
        name: link 名称 (通常为命令行给出的文件名)
        volume_epsilon: 退化阈值

    Returns:
        LinkInertiaRecord
    """
    result = compute_inertia(mesh.vertices, mesh.faces, volume_epsilon=volume_epsilon)
    if result.signed_volume < 0:
        logger.warning(f"{name}: faces point inward (signed volume {result.signed_volume:.6g})")
    return LinkInertiaRecord(
        name=name if name is not None else "",
        volume=result.volume,
        center_of_mass=result.center_of_mass,
        inertia=result.inertia,
    )
