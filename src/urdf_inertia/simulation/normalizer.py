"""
Mass Normalizer
按体积比例把总质量分配到各 link, 并缩放单位密度惯性张量
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.errors import DegenerateGeometryError
from ..core.logger import get_logger
from ..geometry.inertia import LinkInertiaRecord
from ..geometry.offsets import translation_chain

logger = get_logger(__name__)


@dataclass(frozen=True)
class NormalizedLink:
    """归一化后的 link 惯性属性"""
    name: str
    mass: float
    center_of_mass: np.ndarray  # 加上关节累计平移后的质心
    inertia: np.ndarray         # 关于质心, 已按密度缩放
    visual_origin: np.ndarray   # 关节累计平移


def total_volume(records: Sequence[LinkInertiaRecord]) -> float:
    return float(sum(r.volume for r in records))


def normalize(records: Sequence[LinkInertiaRecord],
              target_mass: float,
              offsets: Sequence = ()) -> List[NormalizedLink]:
    """
    把总质量 target_mass 按体积分配到各 link

    所有 link 共用同一密度 target_mass / V, 单位密度张量乘以该密度即得实际张量.

    Args:
        records: 各 link 的测量结果, 顺序即 link 顺序
        target_mass: 总质量 (kg)
        offsets: JointOffset 序列

    Returns:
        NormalizedLink 列表
    """
    if not (math.isfinite(target_mass) and target_mass > 0):
        raise ValueError(f"Target mass must be a positive finite number, got {target_mass!r}")

    volume = total_volume(records)
    if not records or not math.isfinite(volume) or volume <= 0.0:
        raise DegenerateGeometryError(
            f"Total volume of {len(records)} links is {volume!r}, cannot distribute mass")

    density = target_mass / volume
    logger.debug(f"Density {density:.6g} kg/m^3 for total volume {volume:.6g}")

    chain = translation_chain(offsets, len(records))
    links = []
    for record, trans in zip(records, chain):
        links.append(NormalizedLink(
            name=record.name,
            mass=target_mass * record.volume / volume,
            center_of_mass=record.center_of_mass + trans,
            inertia=record.inertia * density,
            visual_origin=trans.copy(),
        ))
    return links
