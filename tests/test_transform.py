# -*- coding: utf-8 -*-
import numpy as np
import pytest

from models import OpenGLTransform, RectF, ViewGeometry, WidgetToFitsTransform


def assert_rect(rect, x, y, width, height):
    assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((x, y, width, height))


def test_default_matrix_is_plain_projection():
    transform = OpenGLTransform()
    np.testing.assert_allclose(transform.transform_matrix(), np.diag([1.0, 1.0, -1.0, 1.0]))


def test_transform_matrix_is_cached_until_mutation():
    transform = OpenGLTransform((200, 100))
    first = transform.transform_matrix()
    second = transform.transform_matrix()
    assert second is first
    assert transform.update_count == 1
    assert not transform.expired
    assert not first.flags.writeable

    transform.set_rotation(30.0)
    assert transform.expired
    third = transform.transform_matrix()
    assert transform.update_count == 2
    assert not np.array_equal(third, first)


def test_setting_same_value_keeps_cache():
    transform = OpenGLTransform((10, 10))
    transform.transform_matrix()
    transform.set_rotation(0.0)
    transform.set_flip(horizontal=False, vertical=False)
    transform.set_image_size((10, 10))
    transform.set_viewrect(RectF(-1.0, -1.0, 2.0, 2.0))
    assert not transform.expired
    transform.transform_matrix()
    assert transform.update_count == 1


def test_aspect_scale_and_border():
    transform = OpenGLTransform((200, 100))
    assert transform.scale == (1.0, 0.5)
    assert_rect(transform.border(), -1.0, -0.5, 2.0, 1.0)

    transform.set_rotation(90.0)
    assert_rect(transform.border(), -0.5, -1.0, 1.0, 2.0)


def test_view_to_display_maps_image_corners():
    transform = OpenGLTransform((200, 100), RectF(-1.0, -0.5, 2.0, 1.0))
    assert transform.map(1.0, 1.0) == pytest.approx((1.0, 1.0))
    assert transform.map(-1.0, -1.0) == pytest.approx((-1.0, -1.0))

    transform.set_horizontal_flip(True)
    assert transform.map(1.0, 1.0) == pytest.approx((-1.0, 1.0))


def test_widget_to_fits_center_and_corner():
    transform = WidgetToFitsTransform((100, 50), (200, 100), RectF(-1.0, -0.5, 2.0, 1.0))
    assert transform.transform(99.5, 49.5) == pytest.approx((50.0, 25.0))
    assert transform.transform(0.0, 0.0) == pytest.approx((0.25, 49.75))

    transform.set_horizontal_flip(True)
    assert transform.transform(0.0, 0.0) == pytest.approx((99.75, 49.75))


def test_widget_to_fits_rotation():
    transform = WidgetToFitsTransform((100, 100), (100, 100))
    transform.set_rotation(90.0)
    # 显示逆时针转 90 度后，widget 左上角对应图像右上角
    assert transform.transform(0.0, 0.0) == pytest.approx((99.5, 99.5))


def test_widget_to_fits_inverts_view_transform():
    image_size, widget_size = (64, 32), (300, 200)
    view = RectF(-0.4, -0.3, 1.1, 0.7)
    forward = OpenGLTransform(image_size, view)
    inverse = WidgetToFitsTransform(image_size, widget_size, view)
    for transform in (forward, inverse):
        transform.set_rotation(37.0)
        transform.set_vertical_flip(True)

    # 图像像素 -> 模型坐标 -> 裁剪坐标 -> widget 像素，再反算回来
    px, py = 20.0, 10.0
    model_x = (px / image_size[0]) * 2.0 - 1.0
    model_y = (py / image_size[1]) * 2.0 - 1.0
    clip_x, clip_y = forward.map(model_x, model_y)
    widget_w, widget_h = widget_size
    wx = (clip_x + (widget_w - 1) / widget_w) * widget_w / 2.0
    wy = (-clip_y + (widget_h - 1) / widget_h) * widget_h / 2.0
    assert inverse.transform(wx, wy) == pytest.approx((px, py))


def test_flip_then_flip_back_restores_view_center():
    geometry = ViewGeometry((120, 80), (300, 200))
    geometry.set_view(RectF(0.1, -0.35, 0.6, 0.4))
    geometry.set_rotation(30.0)
    original_center = geometry.view.center

    assert geometry.set_horizontal_flip(True)
    assert geometry.view.center != pytest.approx(original_center)
    assert geometry.set_horizontal_flip(False)
    assert geometry.view.center == pytest.approx(original_center)

    assert geometry.set_vertical_flip(True)
    assert geometry.set_vertical_flip(False)
    assert geometry.view.center == pytest.approx(original_center)


def test_flip_mirrors_center_across_axis():
    geometry = ViewGeometry((100, 100))
    geometry.set_view(RectF(0.25, -0.1, 0.5, 0.5))
    assert geometry.set_horizontal_flip(True)
    assert geometry.view.center == pytest.approx((-0.5, 0.15))
    assert not geometry.set_horizontal_flip(True)


def test_rotation_moves_view_center():
    geometry = ViewGeometry((100, 100))
    geometry.set_view(RectF(0.25, -0.25, 0.5, 0.5))
    assert geometry.set_rotation(90.0)
    assert geometry.view.center == pytest.approx((0.0, -0.5))
    assert geometry.opengl_transform.rotation == 90.0
    assert geometry.widget_to_fits.rotation == 90.0


def test_fit_and_zoom():
    geometry = ViewGeometry((100, 50))
    geometry.set_widget_size((200, 200))
    assert_rect(geometry.view, -1.0, -1.0, 2.0, 2.0)

    geometry.zoom(2.0)
    assert_rect(geometry.view, -0.5, -0.5, 1.0, 1.0)


def test_resize_keeps_pixel_scale():
    geometry = ViewGeometry((100, 50))
    geometry.set_widget_size((201, 101))
    view = geometry.view
    geometry.set_widget_size((401, 101))
    assert geometry.view.width == pytest.approx(view.width * 2)
    assert geometry.view.height == pytest.approx(view.height)
    assert geometry.view.x == pytest.approx(view.x)


@pytest.mark.parametrize("collapsed_size", [(300, 0), (0, 200), (0, 0)])
def test_collapsed_widget_keeps_view(collapsed_size):
    geometry = ViewGeometry((100, 50), (300, 200))
    geometry.fit()
    view = geometry.view

    geometry.set_widget_size(collapsed_size)
    assert not geometry.has_area
    assert geometry.view == view
    assert geometry.pixel_position(0, 0) is None
    geometry.fit()
    assert geometry.view == view

    # 恢复尺寸后重新适配整幅图像
    geometry.set_widget_size((300, 200))
    assert geometry.has_area
    assert geometry.view == view
    assert geometry.pixel_position(0, 0) is not None
