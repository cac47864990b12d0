# -*- coding: utf-8 -*-
"""
坐标变换（Model）。
在图像像素空间、归一化视图空间（world，y 轴向上）与外部显示空间（widget 像素）之间换算。
矩阵按 4x4 齐次坐标组织，复合顺序与 OpenGL 习惯一致：后乘的变换先作用于点。

- OpenGLTransform：视图矩形 -> 显示单位方块（旋转 -> 翻转 -> 保持长宽比的缩放 -> 正交投影）
- WidgetToFitsTransform：widget 像素 -> 图像小数像素坐标（上述链的逆），用于“光标下是哪个像素”

两者都是“缓存 + 过期标记”：任何 setter 在值变化时置 expired，下次读取矩阵时
用当前状态的不可变快照重新计算。缓存只允许拥有者线程读写，跨线程使用需外部加锁。
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class RectF:
    """浮点矩形 (x, y, width, height)，与 Qt 一致 y 向下：top = y，bottom = y + height。"""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def moved_center(self, cx: float, cy: float) -> "RectF":
        return RectF(cx - self.width / 2, cy - self.height / 2, self.width, self.height)

    def with_size(self, width: float, height: float) -> "RectF":
        """保持左上角不变改变尺寸。"""
        return RectF(self.x, self.y, width, height)


# ---------- 4x4 矩阵工具 ----------

def _sin_cos(angle: float) -> Tuple[float, float]:
    # 90 度整数倍取精确值，避免翻转/旋转后出现 1e-17 级的残差
    quarter = angle / 90.0
    if quarter == int(quarter):
        return ((0.0, 1.0), (1.0, 0.0), (0.0, -1.0), (-1.0, 0.0))[int(quarter) % 4]
    radians = math.radians(angle)
    return math.sin(radians), math.cos(radians)


def rotation(angle: float) -> np.ndarray:
    """绕 z 轴逆时针旋转 angle 度。"""
    s, c = _sin_cos(angle)
    m = np.eye(4)
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def scaling(sx: float, sy: float, sz: float = 1.0) -> np.ndarray:
    return np.diag([sx, sy, sz, 1.0])


def translation(tx: float, ty: float, tz: float = 0.0) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = (tx, ty, tz)
    return m


def ortho(left: float, right: float, bottom: float, top: float,
          near: float = -1.0, far: float = 1.0) -> np.ndarray:
    m = np.eye(4)
    m[0, 0] = 2.0 / (right - left)
    m[1, 1] = 2.0 / (top - bottom)
    m[2, 2] = -2.0 / (far - near)
    m[0, 3] = -(right + left) / (right - left)
    m[1, 3] = -(top + bottom) / (top - bottom)
    m[2, 3] = -(far + near) / (far - near)
    return m


def map_point(matrix: np.ndarray, x: float, y: float) -> Tuple[float, float]:
    px, py, _, w = matrix @ np.array([x, y, 0.0, 1.0])
    return float(px / w), float(py / w)


def map_rect(matrix: np.ndarray, rect: RectF) -> RectF:
    """矩形四角变换后的轴对齐包围矩形。"""
    corners = [
        map_point(matrix, x, y)
        for x in (rect.left, rect.right)
        for y in (rect.top, rect.bottom)
    ]
    xs = [p[0] for p in corners]
    ys = [p[1] for p in corners]
    return RectF(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


# ---------- 变换状态 ----------

@dataclass(frozen=True)
class TransformState:
    """某一时刻变换参数的不可变快照，矩阵只由它计算。"""

    image_width: int
    image_height: int
    scale_x: float
    scale_y: float
    angle: float
    h_flip: bool
    v_flip: bool
    viewrect: RectF
    widget_width: int
    widget_height: int


def _model_matrix(state: TransformState) -> np.ndarray:
    """旋转 -> 翻转 -> 长宽比缩放（按作用顺序为缩放、翻转、旋转）。"""
    return (
        rotation(state.angle)
        @ scaling(-1.0 if state.h_flip else 1.0, -1.0 if state.v_flip else 1.0)
        @ scaling(state.scale_x, state.scale_y)
    )


class OpenGLTransform:
    """视图矩形 -> 显示单位方块 的 MVP 矩阵。"""

    def __init__(
        self,
        image_size: Tuple[int, int] = (1, 1),
        viewrect: RectF = RectF(-1.0, -1.0, 2.0, 2.0),
    ):
        self._expired = True
        self._matrix: Optional[np.ndarray] = None
        # 重算次数，仅用于观测缓存是否生效
        self.update_count = 0
        self._image_size = (1, 1)
        self._scale_x = 1.0
        self._scale_y = 1.0
        self._angle = 0.0
        self._h_flip = False
        self._v_flip = False
        self._viewrect = RectF(-1.0, -1.0, 2.0, 2.0)
        self._widget_size = (1, 1)

        self.set_image_size(image_size)
        self.set_viewrect(viewrect)

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def image_size(self) -> Tuple[int, int]:
        return self._image_size

    @property
    def scale(self) -> Tuple[float, float]:
        return self._scale_x, self._scale_y

    @property
    def rotation(self) -> float:
        return self._angle

    @property
    def horizontal_flip(self) -> bool:
        return self._h_flip

    @property
    def vertical_flip(self) -> bool:
        return self._v_flip

    @property
    def viewrect(self) -> RectF:
        return self._viewrect

    # ---------- setter：值变化时置过期 ----------

    def set_image_size(self, image_size: Tuple[int, int]) -> None:
        image_size = (int(image_size[0]), int(image_size[1]))
        if image_size == self._image_size:
            return
        width, height = image_size
        self._image_size = image_size
        self._scale_x = min(1.0, width / height)
        self._scale_y = min(1.0, height / width)
        self._expired = True

    def set_rotation(self, angle: float) -> None:
        if angle == self._angle:
            return
        self._angle = float(angle)
        self._expired = True

    def set_viewrect(self, viewrect: RectF) -> None:
        if viewrect == self._viewrect:
            return
        self._viewrect = viewrect
        self._expired = True

    def set_horizontal_flip(self, flip: bool) -> None:
        if flip == self._h_flip:
            return
        self._h_flip = bool(flip)
        self._expired = True

    def set_vertical_flip(self, flip: bool) -> None:
        if flip == self._v_flip:
            return
        self._v_flip = bool(flip)
        self._expired = True

    def set_flip(self, horizontal: Optional[bool] = None, vertical: Optional[bool] = None) -> None:
        if horizontal is not None:
            self.set_horizontal_flip(horizontal)
        if vertical is not None:
            self.set_vertical_flip(vertical)

    # ---------- 矩阵 ----------

    def snapshot(self) -> TransformState:
        return TransformState(
            image_width=self._image_size[0],
            image_height=self._image_size[1],
            scale_x=self._scale_x,
            scale_y=self._scale_y,
            angle=self._angle,
            h_flip=self._h_flip,
            v_flip=self._v_flip,
            viewrect=self._viewrect,
            widget_width=self._widget_size[0],
            widget_height=self._widget_size[1],
        )

    @staticmethod
    def compute_matrix(state: TransformState) -> np.ndarray:
        view = state.viewrect
        # 视图矩形 y 向下，world y 向上
        projection = ortho(view.left, view.right, -view.bottom, -view.top)
        return projection @ _model_matrix(state)

    def transform_matrix(self) -> np.ndarray:
        """返回只读的 4x4 矩阵；未过期时直接返回缓存的同一对象。"""
        if self._expired:
            matrix = self.compute_matrix(self.snapshot())
            matrix.setflags(write=False)
            self._matrix = matrix
            self._expired = False
            self.update_count += 1
        return self._matrix

    def map(self, x: float, y: float) -> Tuple[float, float]:
        return map_point(self.transform_matrix(), x, y)

    def border(self) -> RectF:
        """单位方块 (-1,-1)-(1,1) 经旋转、翻转、长宽比缩放后的包围矩形（world 坐标）。"""
        return map_rect(_model_matrix(self.snapshot()), RectF(-1.0, -1.0, 2.0, 2.0))


class WidgetToFitsTransform(OpenGLTransform):
    """widget 像素坐标 -> 图像小数像素坐标。"""

    def __init__(
        self,
        image_size: Tuple[int, int] = (1, 1),
        widget_size: Tuple[int, int] = (1, 1),
        viewrect: RectF = RectF(-1.0, -1.0, 2.0, 2.0),
    ):
        super().__init__(image_size, viewrect)
        self.set_widget_size(widget_size)

    @property
    def widget_size(self) -> Tuple[int, int]:
        return self._widget_size

    def set_widget_size(self, widget_size: Tuple[int, int]) -> None:
        widget_size = (int(widget_size[0]), int(widget_size[1]))
        if widget_size == self._widget_size:
            return
        self._widget_size = widget_size
        self._expired = True

    @staticmethod
    def compute_matrix(state: TransformState) -> np.ndarray:
        view = state.viewrect
        cx, cy = view.center
        widget_width, widget_height = state.widget_width, state.widget_height
        return (
            # 纹理 (0,0)-(1,1) -> 图像像素
            scaling(state.image_width, state.image_height)
            # world -> 纹理
            @ translation(0.5, 0.5)
            @ scaling(0.5 / state.scale_x, 0.5 / state.scale_y)
            # 翻转与旋转的逆
            @ scaling(-1.0 if state.h_flip else 1.0, -1.0 if state.v_flip else 1.0)
            @ rotation(-state.angle)
            # 视图矩形 -> world
            @ translation(cx, -cy)
            @ scaling(view.width / 2.0, -view.height / 2.0)
            # widget 像素中心 (0,0)-(w-1,h-1) -> (-1,-1)-(1,1)
            @ translation(-(widget_width - 1) / widget_width, -(widget_height - 1) / widget_height)
            @ scaling(2.0 / widget_width, 2.0 / widget_height)
        )

    def transform(self, x: float, y: float) -> Tuple[float, float]:
        return self.map(x, y)
