# -*- coding: utf-8 -*-
"""
视图矩形几何（Model）。
持有可见区域（视图矩形，y 向下的 world 坐标）与两个坐标变换，
保证旋转、翻转时视图中心随之移动，画面上居中的区域不会跳变。
"""

from typing import Optional, Tuple

from .transform import (
    OpenGLTransform,
    RectF,
    WidgetToFitsTransform,
    map_point,
    rotation,
)

DEFAULT_VIEW = RectF(-1.0, -1.0, 2.0, 2.0)


class ViewGeometry:
    """
    一个视图的几何状态。
    - opengl_transform：交给渲染层的 MVP 矩阵
    - widget_to_fits：widget 像素 -> 图像像素
    - border：当前旋转/翻转下图像在 world 中的包围矩形，供外部平移时限位
    """

    def __init__(self, image_size: Tuple[int, int] = (1, 1), widget_size: Tuple[int, int] = (1, 1)):
        self.opengl_transform = OpenGLTransform(image_size, DEFAULT_VIEW)
        self.widget_to_fits = WidgetToFitsTransform(image_size, widget_size, DEFAULT_VIEW)
        self._view = DEFAULT_VIEW
        self._widget_size = (int(widget_size[0]), int(widget_size[1]))
        self._border = self.opengl_transform.border()

    @property
    def view(self) -> RectF:
        return self._view

    @property
    def border(self) -> RectF:
        return self._border

    @property
    def rotation(self) -> float:
        return self.opengl_transform.rotation

    @property
    def horizontal_flip(self) -> bool:
        return self.opengl_transform.horizontal_flip

    @property
    def vertical_flip(self) -> bool:
        return self.opengl_transform.vertical_flip

    @property
    def widget_size(self) -> Tuple[int, int]:
        return self._widget_size

    def set_view(self, view: RectF) -> None:
        self._view = view
        self.opengl_transform.set_viewrect(view)
        self.widget_to_fits.set_viewrect(view)

    def set_image_size(self, image_size: Tuple[int, int]) -> None:
        self.opengl_transform.set_image_size(image_size)
        self.widget_to_fits.set_image_size(image_size)
        self._border = self.opengl_transform.border()

    def set_rotation(self, angle: float) -> bool:
        """返回是否发生变化。视图中心按 (旧角度 - 新角度) 旋转（视图坐标中顺时针为正）。"""
        if angle == self.rotation:
            return False
        center = map_point(rotation(self.rotation - angle), *self._view.center)
        self.set_view(self._view.moved_center(*center))
        self.opengl_transform.set_rotation(angle)
        self.widget_to_fits.set_rotation(angle)
        self._border = self.opengl_transform.border()
        return True

    def _flip_view(self, axis: str) -> None:
        # 先转回未旋转的坐标系，沿轴镜像视图中心，再转回去
        unrotated_x, unrotated_y = map_point(rotation(self.rotation), *self._view.center)
        if axis == "x":
            unrotated_x = -unrotated_x
        else:
            unrotated_y = -unrotated_y
        center = map_point(rotation(-self.rotation), unrotated_x, unrotated_y)
        self.set_view(self._view.moved_center(*center))

    def set_horizontal_flip(self, flip: bool) -> bool:
        if flip == self.horizontal_flip:
            return False
        self._flip_view("x")
        self.opengl_transform.set_horizontal_flip(flip)
        self.widget_to_fits.set_horizontal_flip(flip)
        self._border = self.opengl_transform.border()
        return True

    def set_vertical_flip(self, flip: bool) -> bool:
        if flip == self.vertical_flip:
            return False
        self._flip_view("y")
        self.opengl_transform.set_vertical_flip(flip)
        self.widget_to_fits.set_vertical_flip(flip)
        self._border = self.opengl_transform.border()
        return True

    @property
    def has_area(self) -> bool:
        """widget 被分割条或停靠区折叠到 0 宽或 0 高时为 False。"""
        return min(self._widget_size) > 0

    def fit(self) -> None:
        """视图矩形按 widget 长宽比恰好容纳整幅图像，中心与图像中心重合。"""
        if not self.has_area:
            return
        widget_width, widget_height = self._widget_size
        aspect = widget_width / widget_height
        border = self._border
        if border.width / border.height > aspect:
            width, height = border.width, border.width / aspect
        else:
            width, height = border.height * aspect, border.height
        cx, cy = border.center
        self.set_view(RectF(cx - width / 2, -cy - height / 2, width, height))

    def zoom(self, factor: float) -> None:
        """以视图中心为不动点缩放，factor > 1 放大。"""
        assert factor > 0
        view = self._view
        resized = RectF(view.x, view.y, view.width / factor, view.height / factor)
        self.set_view(resized.moved_center(*view.center))

    def set_widget_size(self, widget_size: Tuple[int, int]) -> None:
        """
        widget 尺寸变化：首次设置或从折叠状态恢复时适配整幅图像；
        之后按 (新尺寸 - 1) / (旧尺寸 - 1) 缩放视图，保持左上角不变，使像素比例不变。
        折叠（某边 <= 1）期间只记录尺寸。
        """
        widget_size = (int(widget_size[0]), int(widget_size[1]))
        old_width, old_height = self._widget_size
        self._widget_size = widget_size
        self.widget_to_fits.set_widget_size(widget_size)
        if min(widget_size) <= 1:
            return
        if old_width <= 1 or old_height <= 1:
            self.fit()
            return
        new_width, new_height = widget_size
        view = self._view
        self.set_view(view.with_size(
            view.width * (new_width - 1.0) / (old_width - 1.0),
            view.height * (new_height - 1.0) / (old_height - 1.0),
        ))

    def pixel_position(self, widget_x: float, widget_y: float) -> Optional[Tuple[float, float]]:
        """widget 坐标对应的图像小数像素坐标；widget 没有面积时为 None。"""
        if not self.has_area:
            return None
        return self.widget_to_fits.transform(widget_x, widget_y)
