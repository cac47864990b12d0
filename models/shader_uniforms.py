# -*- coding: utf-8 -*-
"""
显示 uniform 计算（Model）。
渲染层把一个采样拆成 1~4 个独立的字节通道（高位通道在前）上传为纹理，
在着色器里用系数 c、z 逐通道重建颜色表坐标：t = Σ c[i] * (byte[i] / (base - 1) - z[i])。
这样渲染层无需关心原始位宽。本模块负责由窗口 (low, high)、通道布局、颜色表大小推导 c 与 z。
"""

import math
from typing import Sequence, Tuple

import numpy as np

from .data_unit import SampleType
from .errors import PlanCreationError

MAX_CHANNELS = 4

# 采样类型 -> (通道数, 每通道字节数)；每通道 0 字节表示浮点纹理单通道
# INT64 的 2 字节通道未在渲染层验证过
_CHANNEL_LAYOUTS = {
    SampleType.UINT8: (1, 1),
    SampleType.INT16: (2, 1),
    SampleType.INT32: (4, 1),
    SampleType.INT64: (4, 2),
    SampleType.FLOAT32: (1, 0),
}


def channel_layout_for(sample_type: SampleType) -> Tuple[int, int]:
    """返回 (channels, channel_size)；没有对应布局（FLOAT64）时抛出 PlanCreationError。"""
    try:
        return _CHANNEL_LAYOUTS[sample_type]
    except KeyError:
        raise PlanCreationError(sample_type) from None


def compute_coefficients(
    channels: int,
    channel_size: int,
    minmax: Tuple[float, float],
    colormap_size: int,
    bscale: float = 1.0,
    bzero: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    计算每个通道的线性系数 (c, z)，均为长度 channels 的 float32 数组。

    alpha = (1 - 1/N) / (high - low)，d = -0.5 / (alpha * N) + low - bzero。
    channel_size > 0 时 c[i] = bscale * alpha * base^(channels-1-i) * (base-1)，
    z 由 d 按 base 从低位到高位逐个剥离得到；channel_size == 0 时只有一个通道，
    c[0] = bscale * alpha，z[0] = d。

    前置条件 high > low、N > 1 由调用方保证。
    """
    low, high = minmax
    assert 1 <= channels <= MAX_CHANNELS
    assert high > low
    assert colormap_size > 1

    c = np.zeros(channels, dtype=np.float32)
    z = np.zeros(channels, dtype=np.float32)

    alpha = (1.0 - 1.0 / colormap_size) / (high - low)
    minus_d = -0.5 / (alpha * colormap_size) + low - bzero

    if channel_size > 0:
        base = float(1 << (8 * channel_size))
        for i in range(channels):
            c[i] = bscale * alpha * base ** (channels - 1 - i) * (base - 1)
        for j in range(channels - 1, 0, -1):
            integer_part = math.floor(minus_d / base)
            z[j] = (minus_d / base - integer_part) * base / (base - 1)
            minus_d = integer_part
        z[0] = minus_d / (base - 1)
    else:
        assert channels == 1
        c[0] = bscale * alpha
        z[0] = minus_d
    return c, z


def split_channels(raw_values, channels: int, channel_size: int) -> np.ndarray:
    """
    把整数采样拆成通道值，最后一维为通道（高位在前）。
    低位通道取值 [0, base)，最高位通道保留符号，使 Σ byte[i] * base^(channels-1-i) == raw。
    """
    if channel_size == 0:
        return np.asarray(raw_values, dtype=np.float64)[..., np.newaxis]
    raw = np.asarray(raw_values, dtype=np.int64)
    base = 1 << (8 * channel_size)
    parts = []
    for i in range(channels):
        weight = base ** (channels - 1 - i)
        part = np.floor_divide(raw, weight)
        if i > 0:
            part = np.mod(part, base)
        parts.append(part)
    return np.stack(parts, axis=-1).astype(np.float64)


def color_coordinate(
    channel_values,
    c: Sequence[float],
    z: Sequence[float],
    channel_size: int,
) -> np.ndarray:
    """着色器重建公式的 CPU 参考实现，返回颜色表归一化坐标 t。"""
    values = np.asarray(channel_values, dtype=np.float64)
    if channel_size > 0:
        values = values / float((1 << (8 * channel_size)) - 1)
    c64 = np.asarray(c, dtype=np.float64)
    z64 = np.asarray(z, dtype=np.float64)
    return np.sum(c64 * (values - z64), axis=-1)


def color_index(t, colormap_size: int) -> np.ndarray:
    """颜色表坐标 t 对应的离散索引，截断到 [0, N)。"""
    index = np.floor(np.asarray(t, dtype=np.float64) * colormap_size)
    return np.clip(index, 0, colormap_size - 1).astype(np.int64)


class ShaderUniforms:
    """
    一个视图的显示 uniform。
    通道布局与 BSCALE/BZERO 随 HDU 固定；窗口或颜色表大小变化时立即重算 c、z。
    """

    def __init__(
        self,
        channels: int,
        channel_size: int,
        bscale: float = 1.0,
        bzero: float = 0.0,
        minmax: Tuple[float, float] = (0.0, 1.0),
        colormap_size: int = 256,
    ):
        assert 0 < channels <= MAX_CHANNELS
        assert channel_size > 0 or channels == 1
        self.channels = channels
        self.channel_size = channel_size
        self.bscale = bscale
        self.bzero = bzero
        self._minmax = (float(minmax[0]), float(minmax[1]))
        self._colormap_size = colormap_size
        self._update_cz()

    @classmethod
    def for_sample_type(cls, sample_type: SampleType, bscale: float = 1.0, bzero: float = 0.0, **kwargs) -> "ShaderUniforms":
        channels, channel_size = channel_layout_for(sample_type)
        return cls(channels, channel_size, bscale, bzero, **kwargs)

    @property
    def minmax(self) -> Tuple[float, float]:
        return self._minmax

    @property
    def colormap_size(self) -> int:
        return self._colormap_size

    @property
    def c(self) -> np.ndarray:
        return self._c.copy()

    @property
    def z(self) -> np.ndarray:
        return self._z.copy()

    def set_min_max(self, minmax: Tuple[float, float]) -> bool:
        """返回是否发生变化。"""
        minmax = (float(minmax[0]), float(minmax[1]))
        if minmax == self._minmax:
            return False
        self._minmax = minmax
        self._update_cz()
        return True

    def set_colormap_size(self, colormap_size: int) -> bool:
        if colormap_size == self._colormap_size:
            return False
        self._colormap_size = colormap_size
        self._update_cz()
        return True

    def _update_cz(self) -> None:
        self._c, self._z = compute_coefficients(
            self.channels,
            self.channel_size,
            self._minmax,
            self._colormap_size,
            self.bscale,
            self.bzero,
        )

    def color_coordinate(self, raw_values) -> np.ndarray:
        """原始采样 -> 颜色表坐标，按本布局先拆通道再重建。"""
        channel_values = split_channels(raw_values, self.channels, self.channel_size)
        return color_coordinate(channel_values, self._c, self._z, self.channel_size)
