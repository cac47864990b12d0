# -*- coding: utf-8 -*-
"""
显示状态（Model）。
渲染层每个视图的可变参数：物理值窗口、通道布局、颜色表大小；由 ViewModel 读写，
View 通过 ViewModel 间接访问。
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class DisplayState:
    """
    一个视图的显示参数。
    - low_limit / high_limit：映射到颜色表两端的物理值窗口，要求 high > low
    - channels / channel_size：采样拆分为 1~4 个通道、每通道字节数（0 表示浮点单通道）
    - colormap_size：颜色表条目数 N，要求 N > 1
    """

    # 当前显示的 HDU 序号，0 为主 HDU
    hdu_index: int = 0
    low_limit: float = 0.0
    high_limit: float = 1.0
    channels: int = 1
    channel_size: int = 1
    colormap_size: int = 256
    # 最近一次查询的光标像素 (x, y)
    cursor: Optional[Tuple[int, int]] = None

    @property
    def window(self) -> Tuple[float, float]:
        return self.low_limit, self.high_limit

    @property
    def channel_layout(self) -> Tuple[int, int]:
        return self.channels, self.channel_size
