# -*- coding: utf-8 -*-
"""
FITS 容器（Model）。
一个主 HDU 加若干扩展 HDU，每个 HDU = 头部单元 + 数据单元。
构造时一次性顺序解析整个字节流，之后只读；任何解析错误都会中止整个容器的构造。
"""

import logging
from math import prod
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple, Union

from .data_unit import DataUnit, EmptyDataUnit, create_from_bitpix
from .errors import WrongHeaderValue
from .fits_storage import FITSStorage
from .header_unit import HeaderUnit

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("IMAGE", "IUEIMAGE")


def _required_int(header: HeaderUnit, key: str) -> int:
    if key not in header:
        raise WrongHeaderValue(key, "")
    return header.header_as(key, int)


def _axis_length(header: HeaderUnit, key: str) -> int:
    """NAXIS 与 NAXISn 必须是非负整数。"""
    value = _required_int(header, key)
    if value < 0:
        raise WrongHeaderValue(key, header.header(key))
    return value


class HeaderDataUnit:
    """头部与数据的组合，构造后不再修改。"""

    def __init__(self, header: HeaderUnit, data: DataUnit):
        self._header = header
        self._data = data
        # 逐像素取值使用
        self._bscale = header.bscale
        self._bzero = header.bzero

    @classmethod
    def parse(cls, storage: FITSStorage) -> "HeaderDataUnit":
        """
        从当前位置解析一个 HDU。
        - NAXIS1 为宽、NAXIS2 为高（NAXIS=1 时高为 1），NAXIS>2 时读入整个立方体、视图取第一平面
        - 非 IMAGE 扩展（表格等）与随机组主 HDU 只跳过数据区，数据单元为 EmptyDataUnit
        """
        offset = storage.position
        header = HeaderUnit.parse(storage)
        if "BITPIX" not in header:
            raise WrongHeaderValue("BITPIX", "")
        bitpix = header.header("BITPIX")
        naxis = _axis_length(header, "NAXIS")
        axes = [_axis_length(header, f"NAXIS{i}") for i in range(1, naxis + 1)]

        xtension = header.header("XTENSION", None)
        random_groups = (
            xtension is None and bool(axes) and axes[0] == 0
            and header.header_as("GROUPS", bool, False)
        )
        if random_groups or (xtension is not None and xtension.upper() not in IMAGE_EXTENSIONS):
            data = cls._skip_data(storage, header, bitpix, axes[1:] if random_groups else axes)
            logger.info(
                "跳过非图像 HDU（XTENSION=%s，偏移 %d）", xtension or "GROUPS", offset
            )
            return cls(header, data)

        width = axes[0] if axes else 0
        height = (axes[1] if len(axes) > 1 else 1) if axes else 0
        depth = prod(axes[2:])
        data = create_from_bitpix(bitpix, storage, height, width, depth)
        logger.debug(
            "解析 HDU：偏移 %d，BITPIX=%s，尺寸 %s，数据 %r", offset, bitpix, axes, data
        )
        return cls(header, data)

    @staticmethod
    def _skip_data(
        storage: FITSStorage, header: HeaderUnit, bitpix: str, axes: List[int]
    ) -> EmptyDataUnit:
        try:
            element_size = abs(int(bitpix)) // 8
        except ValueError:
            raise WrongHeaderValue("BITPIX", bitpix) from None
        pcount = header.header_as("PCOUNT", int, 0)
        gcount = header.header_as("GCOUNT", int, 1)
        length = element_size * gcount * (pcount + (prod(axes) if axes else 0))
        if length > 0:
            storage.advance_bytes(length)
        return EmptyDataUnit()

    @property
    def header(self) -> HeaderUnit:
        return self._header

    @property
    def data(self) -> DataUnit:
        return self._data

    @property
    def bscale(self) -> float:
        return self._bscale

    @property
    def bzero(self) -> float:
        return self._bzero

    @property
    def is_image(self) -> bool:
        return self._data.is_image

    @property
    def name(self) -> str:
        """EXTNAME，缺省时主 HDU 为 PRIMARY。"""
        default = "PRIMARY" if "SIMPLE" in self._header else ""
        return self._header.header("EXTNAME", default)

    def __repr__(self) -> str:
        return f"HeaderDataUnit(name={self.name!r}, data={self._data!r})"


class FITS:
    """
    FITS 容器。
    - source：文件路径、二进制文件对象或 FITSStorage
    - primary_hdu：主 HDU；迭代容器得到扩展 HDU（保持文件顺序）
    - 容器持有字节源，close() 或离开 with 块时释放
    """

    def __init__(self, source: Union[str, Path, BinaryIO, FITSStorage]):
        if isinstance(source, FITSStorage):
            storage = source
        elif isinstance(source, (str, Path)):
            storage = FITSStorage.open(source)
        else:
            storage = FITSStorage(source)
        self._storage = storage

        try:
            self._primary_hdu = HeaderDataUnit.parse(storage)
            extensions = []
            while not storage.at_end():
                extensions.append(HeaderDataUnit.parse(storage))
        except Exception:
            storage.close()
            raise
        self._extensions: Tuple[HeaderDataUnit, ...] = tuple(extensions)
        logger.debug("FITS 解析完成：主 HDU + %d 个扩展", len(self._extensions))

    @property
    def primary_hdu(self) -> HeaderDataUnit:
        return self._primary_hdu

    @property
    def header_unit(self) -> HeaderUnit:
        return self._primary_hdu.header

    @property
    def data_unit(self) -> DataUnit:
        return self._primary_hdu.data

    @property
    def extensions(self) -> Tuple[HeaderDataUnit, ...]:
        return self._extensions

    @property
    def hdus(self) -> Tuple[HeaderDataUnit, ...]:
        """主 HDU 在前，随后是全部扩展。"""
        return (self._primary_hdu,) + self._extensions

    def __iter__(self) -> Iterator[HeaderDataUnit]:
        return iter(self._extensions)

    def close(self) -> None:
        self._storage.close()

    def __enter__(self) -> "FITS":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
