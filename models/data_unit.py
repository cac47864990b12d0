# -*- coding: utf-8 -*-
"""
FITS 数据单元（Model）。
BITPIX 决定六种采样类型之一；ImageDataUnit 是对分页字节源缓冲区的只读 NumPy 视图（大端序 dtype），
EmptyDataUnit 表示没有数据的 HDU（NAXIS=0 等），二者构成封闭的数据单元类型集合。
"""

import enum
from typing import Tuple, Union

import numpy as np

from .errors import UnsupportedBitpix
from .fits_storage import FITSStorage, Page


class SampleType(enum.Enum):
    """BITPIX 代码与磁盘上的采样编码（FITS 固定为大端序）。"""

    UINT8 = ("8", ">u1")
    INT16 = ("16", ">i2")
    INT32 = ("32", ">i4")
    INT64 = ("64", ">i8")
    FLOAT32 = ("-32", ">f4")
    FLOAT64 = ("-64", ">f8")

    def __init__(self, bitpix: str, dtype: str):
        self.bitpix = bitpix
        self.dtype = np.dtype(dtype)

    @property
    def element_size(self) -> int:
        return self.dtype.itemsize

    @classmethod
    def from_bitpix(cls, bitpix: str) -> "SampleType":
        code = str(bitpix).strip()
        for sample_type in cls:
            if sample_type.bitpix == code:
                return sample_type
        raise UnsupportedBitpix(code)


class EmptyDataUnit:
    """没有图像数据的 HDU，不携带尺寸。"""

    is_image = False
    length = 0

    def __repr__(self) -> str:
        return "EmptyDataUnit()"


class ImageDataUnit:
    """
    二维图像数据单元。
    - samples：长度 height*width 的一维只读视图，直接借用 Page 的缓冲区，不复制
    - array：同一缓冲区上 (height, width) 的二维视图
    - depth：NAXIS>2 时文件中的平面数，视图只覆盖第一个平面
    """

    is_image = True

    def __init__(
        self,
        sample_type: SampleType,
        page: Page,
        height: int,
        width: int,
        depth: int = 1,
    ):
        self.sample_type = sample_type
        self.height = height
        self.width = width
        self.depth = depth
        self._page = page
        self.samples: np.ndarray = np.frombuffer(
            page.data, dtype=sample_type.dtype, count=height * width
        )

    @property
    def data(self) -> memoryview:
        return self._page.data

    @property
    def length(self) -> int:
        """元素个数。"""
        return self.height * self.width

    @property
    def nbytes(self) -> int:
        return self.samples.nbytes

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)。"""
        return self.width, self.height

    @property
    def array(self) -> np.ndarray:
        return self.samples.reshape(self.height, self.width)

    def __repr__(self) -> str:
        return (
            f"ImageDataUnit({self.sample_type.name}, height={self.height}, "
            f"width={self.width}, depth={self.depth})"
        )


DataUnit = Union[ImageDataUnit, EmptyDataUnit]


def create_from_bitpix(
    bitpix: str,
    storage: FITSStorage,
    height: int,
    width: int,
    depth: int = 1,
) -> DataUnit:
    """
    按 BITPIX 创建数据单元并消耗对应字节（向上取整到块边界）。
    不支持的 BITPIX 抛出 UnsupportedBitpix；元素个数为 0 时返回 EmptyDataUnit 且不消耗字节。
    """
    sample_type = SampleType.from_bitpix(bitpix)
    length = sample_type.element_size * height * width * depth
    if length == 0:
        return EmptyDataUnit()
    page = storage.advance_bytes(length)
    return ImageDataUnit(sample_type, page, height, width, depth)
