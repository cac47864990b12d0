# -*- coding: utf-8 -*-
"""
Model 层：FITS 解码与显示数值管线。
- FITSStorage / HeaderUnit / create_from_bitpix：分页字节源、头部解析、采样类型分派
- FITS / HeaderDataUnit：容器与 HDU
- value_at / ShaderUniforms：像素物理值与着色器系数
- OpenGLTransform / WidgetToFitsTransform / ViewGeometry：坐标变换与视图矩形
- DisplayState / ViewerConfig：显示状态与配置
"""

from .app_state import DisplayState
from .data_unit import EmptyDataUnit, ImageDataUnit, SampleType, create_from_bitpix
from .errors import (
    FITSError,
    NoImageInContainer,
    PlanCreationError,
    UnexpectedEnd,
    UnsupportedBitpix,
    WrongHeaderValue,
)
from .fits import FITS, HeaderDataUnit
from .fits_storage import BLOCK_SIZE, CARD_SIZE, FITSStorage, Page
from .header_unit import HeaderUnit
from .pixel import Pixel, hdu_min_max, physical_image, value_at
from .shader_uniforms import (
    ShaderUniforms,
    channel_layout_for,
    color_coordinate,
    color_index,
    compute_coefficients,
    split_channels,
)
from .transform import OpenGLTransform, RectF, TransformState, WidgetToFitsTransform
from .viewer_config import ViewerConfig, load_viewer_config
from .viewrect import ViewGeometry

__all__ = [
    "BLOCK_SIZE",
    "CARD_SIZE",
    "DisplayState",
    "EmptyDataUnit",
    "FITS",
    "FITSError",
    "FITSStorage",
    "HeaderDataUnit",
    "HeaderUnit",
    "ImageDataUnit",
    "NoImageInContainer",
    "OpenGLTransform",
    "Page",
    "Pixel",
    "PlanCreationError",
    "RectF",
    "SampleType",
    "ShaderUniforms",
    "TransformState",
    "UnexpectedEnd",
    "UnsupportedBitpix",
    "ViewGeometry",
    "ViewerConfig",
    "WidgetToFitsTransform",
    "WrongHeaderValue",
    "channel_layout_for",
    "color_coordinate",
    "color_index",
    "compute_coefficients",
    "create_from_bitpix",
    "hdu_min_max",
    "load_viewer_config",
    "physical_image",
    "split_channels",
    "value_at",
]
