# -*- coding: utf-8 -*-
"""
像素取值管线（Model）。
读取某个二维坐标处的原始采样，完成字节序校正（FITS 固定大端序），再按头部的
BSCALE/BZERO 做仿射变换得到物理值。
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .fits import HeaderDataUnit


@dataclass(frozen=True)
class Pixel:
    """
    光标下的像素：position 为 (x, y) 图像坐标；
    value 为物理值，坐标落在图像外时为 None。
    """

    position: Tuple[int, int]
    value: Optional[float] = None

    @property
    def inside_image(self) -> bool:
        return self.value is not None


def value_at(hdu: HeaderDataUnit, x: int, y: int) -> float:
    """
    返回 (x, y) 处的物理值 raw * BSCALE + BZERO。
    调用方负责保证 0 <= x < width、0 <= y < height，这里不做范围检查。
    """
    data = hdu.data
    raw = float(data.samples[y * data.width + x])
    return raw * hdu.bscale + hdu.bzero


def physical_image(hdu: HeaderDataUnit) -> np.ndarray:
    """整幅图像（第一平面）的物理值，float64，形状 (height, width)。"""
    raw = hdu.data.array.astype(np.float64)
    return raw * hdu.bscale + hdu.bzero


def hdu_min_max(hdu: HeaderDataUnit) -> Tuple[float, float]:
    """
    图像有限物理值的 (min, max)，忽略 NaN/Inf，用作初始窗口。
    没有有限值或 min == max 时放宽为长度 1 的区间，保证 high > low。
    """
    values = physical_image(hdu)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return 0.0, 1.0
    low, high = float(finite.min()), float(finite.max())
    if high <= low:
        high = low + 1.0
    return low, high
