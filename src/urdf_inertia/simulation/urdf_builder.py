# urdf_builder.py - 生成 URDF <inertial>/<visual> 片段
from pathlib import Path
from typing import Sequence, Union

from ..core.logger import get_logger

logger = get_logger(__name__)

INDENT = " " * 8


def _fixed(value: float) -> str:
    return f"{value:014.11f}"


def _xyz(vector) -> str:
    return " ".join(_fixed(v) for v in vector)


def format_link(link, uri_prefix: str = "model://") -> str:
    """
    生成单个 link 的 URDF 片段

    Args:
        link: NormalizedLink
        uri_prefix: 网格引用前缀

    Returns:
        文本块 (以换行结尾)
    """
    I = link.inertia
    pad_yy = " " * 42
    pad_zz = " " * 63
    lines = [
        f"{link.name}:",
        f"{INDENT}<inertial>",
        f"{INDENT}    <mass value=\"{link.mass:f}\" />",
        f"{INDENT}    <origin rpy=\"0 0 0\" xyz=\"{_xyz(link.center_of_mass)}\" />",
        f"{INDENT}    <inertia ixx=\"{_fixed(I[0, 0])}\" ixy=\"{_fixed(I[0, 1])}\" ixz=\"{_fixed(I[0, 2])}\"",
        f"{pad_yy}iyy=\"{_fixed(I[1, 1])}\" iyz=\"{_fixed(I[1, 2])}\"",
        f"{pad_zz}izz=\"{_fixed(I[2, 2])}\" />",
        f"{INDENT}</inertial>",
        f"{INDENT}<visual>",
        f"{INDENT}    <origin rpy=\"0 0 0\" xyz=\"{_xyz(link.visual_origin)}\" />",
        f"{INDENT}    <geometry>",
        f"{INDENT}        <mesh filename=\"{uri_prefix}{link.name}\" />",
        f"{INDENT}    </geometry>",
        f"{INDENT}</visual>",
    ]
    return "\n".join(lines) + "\n"


def format_report(links: Sequence, target_mass: float, uri_prefix: str = "model://") -> str:
    """
    生成全部 link 的报告

    Args:
        links: NormalizedLink 列表
        target_mass: 总质量
        uri_prefix: 网格引用前缀
    """
    header = f"URDF data for {len(links)} links with overall mass of {target_mass:.3f} kg:\n"
    return header + "".join(format_link(link, uri_prefix) for link in links)


def save_urdf(text: str, output_path: Union[str, Path]) -> Path:
    """
    保存 URDF 报告到文件

    Args:
        text: 报告文本
        output_path: 输出文件路径
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info(f"Saved URDF fragment to {output_path}")
    return output_path
