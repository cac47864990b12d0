# -*- coding: utf-8 -*-
"""
主界面 ViewModel（MVVM）。
负责：FITS 加载与 HDU 选择、显示窗口/颜色表状态、着色器 uniform、旋转翻转缩放、光标下像素取值。
渲染层（View）通过信号接收刷新通知，通过方法获取展示数据与执行命令。
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
from PySide6.QtCore import QObject, Signal

from models import (
    DisplayState,
    FITS,
    FITSError,
    HeaderDataUnit,
    NoImageInContainer,
    Pixel,
    ShaderUniforms,
    ViewerConfig,
    ViewGeometry,
    hdu_min_max,
    value_at,
)

logger = logging.getLogger(__name__)


def find_first_image_hdu(fits: FITS) -> Tuple[int, HeaderDataUnit]:
    """按主 HDU、扩展的顺序返回第一个含图像的 (序号, HDU)；都没有时抛出 NoImageInContainer。"""
    for index, hdu in enumerate(fits.hdus):
        if hdu.is_image:
            return index, hdu
    raise NoImageInContainer()


class MainViewModel(QObject):
    """
    主界面 ViewModel。
    - 持有 FITS 容器、当前 HDU、DisplayState、ShaderUniforms 与 ViewGeometry
    - 发出信号：fits_loaded, hdu_changed, levels_changed, uniforms_changed, transform_changed, status_message
    """

    # 文件加载完成
    fits_loaded = Signal()
    # 当前显示的 HDU 变化（View 需重建纹理）
    hdu_changed = Signal()
    # 物理值窗口变化 (low, high)
    levels_changed = Signal(float, float)
    # c / z 系数变化（View 更新着色器 uniform 并重绘）
    uniforms_changed = Signal()
    # 视图矩形、旋转或翻转变化（View 更新 MVP 矩阵并重绘）
    transform_changed = Signal()
    # 状态栏文案
    status_message = Signal(str)

    def __init__(self, config: Optional[ViewerConfig] = None, parent=None):
        super().__init__(parent)
        self._config = config or ViewerConfig()
        self._display_state = DisplayState(colormap_size=self._config.colormap_size)
        self._fits: Optional[FITS] = None
        self._hdu: Optional[HeaderDataUnit] = None
        self._uniforms: Optional[ShaderUniforms] = None
        self._geometry = ViewGeometry()

    @property
    def config(self) -> ViewerConfig:
        return self._config

    @property
    def display_state(self) -> DisplayState:
        """显示状态，只读供 View 绑定滑条等。"""
        return self._display_state

    @property
    def fits(self) -> Optional[FITS]:
        return self._fits

    @property
    def hdu(self) -> Optional[HeaderDataUnit]:
        """当前显示的 HDU，未加载时为 None。"""
        return self._hdu

    @property
    def uniforms(self) -> Optional[ShaderUniforms]:
        return self._uniforms

    @property
    def geometry(self) -> ViewGeometry:
        return self._geometry

    # ---------- 命令：数据加载 ----------

    def load_fits_file(self, path: Union[str, Path]) -> bool:
        """
        打开 FITS 文件并显示第一个含图像的 HDU。
        失败时保留原有状态，发出 status_message 并返回 False。
        """
        fits = None
        try:
            fits = FITS(Path(path))
            index, hdu = find_first_image_hdu(fits)
            uniforms = self._create_uniforms(hdu)
        except (FITSError, OSError) as e:
            if fits is not None:
                fits.close()
            logger.error("加载 FITS 失败：%s：%s", path, e)
            self.status_message.emit(f"加载 FITS 失败：{e}")
            return False

        old_fits = self._fits
        self._fits = fits
        if old_fits is not None:
            old_fits.close()
        self._show_hdu(index, hdu, uniforms)

        width, height = hdu.data.size
        logger.info("已加载 %s：HDU %d，%s，%dx%d", path, index, hdu.data.sample_type.name, width, height)
        self.status_message.emit(f"已加载 FITS 文件：{path}，HDU {index}，图像尺寸 {width}x{height}")
        self.fits_loaded.emit()
        return True

    def select_hdu(self, index: int) -> bool:
        """切换到第 index 个 HDU（0 为主 HDU）；不含图像或无法显示时返回 False。"""
        if self._fits is None:
            return False
        hdus = self._fits.hdus
        if not 0 <= index < len(hdus):
            self.status_message.emit(f"HDU 序号 {index} 超出范围（共 {len(hdus)} 个）")
            return False
        hdu = hdus[index]
        if not hdu.is_image:
            self.status_message.emit(f"HDU {index} 不含图像数据")
            return False
        try:
            uniforms = self._create_uniforms(hdu)
        except FITSError as e:
            logger.error("无法显示 HDU %d：%s", index, e)
            self.status_message.emit(str(e))
            return False
        self._show_hdu(index, hdu, uniforms)
        return True

    def close(self) -> None:
        if self._fits is not None:
            self._fits.close()
        self._fits = None
        self._hdu = None
        self._uniforms = None

    def _create_uniforms(self, hdu: HeaderDataUnit) -> ShaderUniforms:
        return ShaderUniforms.for_sample_type(
            hdu.data.sample_type,
            hdu.bscale,
            hdu.bzero,
            minmax=hdu_min_max(hdu),
            colormap_size=self._display_state.colormap_size,
        )

    def _show_hdu(self, index: int, hdu: HeaderDataUnit, uniforms: ShaderUniforms) -> None:
        old_size = self._hdu.data.size if self._hdu is not None else None
        self._hdu = hdu
        self._uniforms = uniforms

        state = self._display_state
        state.hdu_index = index
        state.low_limit, state.high_limit = uniforms.minmax
        state.channels = uniforms.channels
        state.channel_size = uniforms.channel_size
        state.cursor = None

        self._geometry.set_image_size(hdu.data.size)
        if hdu.data.size != old_size and self._config.fit_on_load:
            self._geometry.fit()

        self.hdu_changed.emit()
        self.levels_changed.emit(state.low_limit, state.high_limit)
        self.uniforms_changed.emit()
        self.transform_changed.emit()

    # ---------- 命令：窗口与颜色表 ----------

    def change_levels(self, low: float, high: float) -> None:
        """设置物理值窗口，调用方保证 high > low。"""
        if self._uniforms is None:
            return
        if self._uniforms.set_min_max((low, high)):
            self._display_state.low_limit, self._display_state.high_limit = self._uniforms.minmax
            self.levels_changed.emit(self._display_state.low_limit, self._display_state.high_limit)
            self.uniforms_changed.emit()

    def reset_levels(self) -> None:
        """窗口恢复为图像的 (min, max)。"""
        if self._hdu is not None:
            self.change_levels(*hdu_min_max(self._hdu))

    def change_colormap_size(self, colormap_size: int) -> None:
        """切换颜色表时由 View 调用，传入新颜色表的条目数。"""
        self._display_state.colormap_size = colormap_size
        if self._uniforms is not None and self._uniforms.set_colormap_size(colormap_size):
            self.uniforms_changed.emit()

    def get_uniforms(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """返回 (c, z) 供 View 写入着色器，未加载时为 None。"""
        if self._uniforms is None:
            return None
        return self._uniforms.c, self._uniforms.z

    # ---------- 命令：旋转、翻转、缩放 ----------

    def set_rotation(self, angle: float) -> None:
        if self._geometry.set_rotation(angle):
            self.transform_changed.emit()

    def set_horizontal_flip(self, flip: bool) -> None:
        if self._geometry.set_horizontal_flip(flip):
            self.transform_changed.emit()

    def set_vertical_flip(self, flip: bool) -> None:
        if self._geometry.set_vertical_flip(flip):
            self.transform_changed.emit()

    def set_widget_size(self, width: int, height: int) -> None:
        """View 尺寸变化时调用。"""
        self._geometry.set_widget_size((width, height))
        self.transform_changed.emit()

    def zoom_in(self) -> None:
        self._geometry.zoom(self._config.zoom_in_factor)
        self.transform_changed.emit()

    def zoom_out(self) -> None:
        self._geometry.zoom(self._config.zoom_out_factor)
        self.transform_changed.emit()

    def fit_to_window(self) -> None:
        self._geometry.fit()
        self.transform_changed.emit()

    def get_transform_matrix(self) -> np.ndarray:
        """当前 MVP 矩阵（4x4，只读）。"""
        return self._geometry.opengl_transform.transform_matrix()

    # ---------- 供 View 获取展示数据 ----------

    def pixel_from_widget_coordinate(self, widget_x: float, widget_y: float) -> Optional[Pixel]:
        """
        将 View 上鼠标位置反算为图像像素并取物理值。
        落在图像外时返回不带取值的 Pixel，未加载或 View 被折叠时返回 None。
        """
        if self._hdu is None:
            return None
        position = self._geometry.pixel_position(widget_x, widget_y)
        if position is None:
            self._display_state.cursor = None
            return None
        fx, fy = position
        position = (int(math.floor(fx)), int(math.floor(fy)))
        self._display_state.cursor = position
        x, y = position
        width, height = self._hdu.data.size
        if 0 <= x < width and 0 <= y < height:
            return Pixel(position, value_at(self._hdu, x, y))
        return Pixel(position)

    def get_hdu_names(self) -> List[str]:
        """各 HDU 的名称（EXTNAME），供 View 的 HDU 选择列表使用。"""
        if self._fits is None:
            return []
        return [hdu.name or f"HDU {i}" for i, hdu in enumerate(self._fits.hdus)]

    def get_hdu_info(self) -> dict:
        """返回当前 HDU 的摘要信息，供 View 绑定到右侧面板。"""
        if self._hdu is None:
            return {}
        header = self._hdu.header
        width, height = self._hdu.data.size
        return {
            "name": self._hdu.name or "-",
            "bitpix": header.header("BITPIX", "-"),
            "width": width,
            "height": height,
            "bscale": self._hdu.bscale,
            "bzero": self._hdu.bzero,
            "object": header.header("OBJECT", "-"),
        }

    def get_header_cards(self) -> List[Tuple[str, str]]:
        """当前 HDU 的全部 (关键字, 取值)，保持文件顺序。"""
        if self._hdu is None:
            return []
        return list(self._hdu.header.items())
