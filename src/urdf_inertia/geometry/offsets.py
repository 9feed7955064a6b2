"""
Joint-Offset Module
把关节平移累加成运动链, 用于把各 link 的质心表达到其关节坐标系

第 i 个 link 的偏移是从第一个关节到第 i 个关节 (含) 平移之和的相反数;
关节记录少于 link 数时, 之后的 link 沿用最后一个累计值.
"""

from typing import Sequence

import numpy as np


def _translations(offsets: Sequence) -> np.ndarray:
    if len(offsets) == 0:
        return np.zeros((0, 3))
    return np.array([np.asarray(o, dtype=np.float64)[:3] for o in offsets], dtype=np.float64)


def translation_chain(offsets: Sequence, link_count: int) -> np.ndarray:
    """
    计算所有 link 的累计平移

    Args:
        offsets: JointOffset 序列 (或任何前三项为平移的序列)
        link_count: link 数量

    Returns:
        (link_count, 3) 累计平移
    """
    chain = np.zeros((link_count, 3))
    if link_count == 0 or len(offsets) == 0:
        return chain

    cumulative = -np.cumsum(_translations(offsets), axis=0)
    n = min(link_count, len(cumulative))
    chain[:n] = cumulative[:n]
    chain[n:] = cumulative[n - 1]
    return chain


def cumulative_translation(offsets: Sequence, upto_index: int) -> np.ndarray:
    """
    第 upto_index 个 link (从 0 开始) 的累计平移

    Args:
        offsets: JointOffset 序列
        upto_index: link 索引

    Returns:
        (3,) 平移向量
    """
    if upto_index < 0:
        raise IndexError(f"link index must be >= 0, got {upto_index}")
    return translation_chain(offsets, upto_index + 1)[upto_index]
