# -*- coding: utf-8 -*-
"""
FITS 头部单元（Model）。
从分页字节源逐块读取 80 字节卡片，直到 END 卡片，得到有序的 关键字 -> 原始字符串 映射。
取值一律按字符串保存，数值/布尔转换由调用方通过 header_as 按需完成。
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import WrongHeaderValue
from .fits_storage import FITSStorage

logger = logging.getLogger(__name__)

END_KEYWORD = "END"
VALUE_INDICATOR = "= "
COMMENTARY_KEYWORDS = ("COMMENT", "HISTORY", "")

_MISSING = object()


def parse_value(field: str) -> str:
    """
    解析卡片的取值字段（第 11 列起）。
    - 字符串：去掉单引号，'' 还原为 '，去掉尾部空格
    - 其他：去掉 / 之后的注释与两侧空格
    """
    text = field.lstrip()
    if text.startswith("'"):
        chars = []
        i = 1
        while i < len(text):
            ch = text[i]
            if ch == "'":
                if text[i + 1:i + 2] == "'":
                    chars.append("'")
                    i += 2
                    continue
                break
            chars.append(ch)
            i += 1
        return "".join(chars).rstrip()
    slash = text.find("/")
    if slash >= 0:
        text = text[:slash]
    return text.strip()


def convert_value(value: str, value_type: type):
    """把头部原始字符串转换为 value_type，失败时抛出 ValueError。"""
    if value_type is bool:
        if value == "T":
            return True
        if value == "F":
            return False
        raise ValueError(value)
    if value_type is float:
        # FITS 允许 Fortran 风格的 D 指数
        return float(value.replace("D", "E").replace("d", "e"))
    if value_type is int:
        return int(value)
    return value_type(value)


class HeaderUnit(Mapping):
    """
    一个 HDU 的头部。
    - 作为只读 Mapping 使用：键为大写关键字，值为原始字符串，保持卡片顺序
    - COMMENT / HISTORY / 空关键字 不进入映射，分别保存在 comments、history
    """

    def __init__(
        self,
        headers: Dict[str, str],
        comments: Iterable[str] = (),
        history: Iterable[str] = (),
    ):
        self._headers: Dict[str, str] = dict(headers)
        self._comments: List[str] = list(comments)
        self._history: List[str] = list(history)

    @classmethod
    def parse(cls, storage: FITSStorage) -> "HeaderUnit":
        """读取卡片直到 END；END 所在块的剩余卡片视为填充。缺少 END 时抛出 UnexpectedEnd。"""
        headers: Dict[str, str] = {}
        comments: List[str] = []
        history: List[str] = []
        while True:
            page = storage.advance(1)
            for raw_card in page.cards():
                card = raw_card.decode("ascii", errors="replace")
                keyword = card[:8].rstrip().upper()
                if keyword == END_KEYWORD:
                    return cls(headers, comments, history)

                if keyword == "HIERARCH" and "=" in card[8:]:
                    name, _, field = card[8:].partition("=")
                    keyword, value = name.strip().upper(), parse_value(field)
                elif card[8:10] == VALUE_INDICATOR and keyword not in COMMENTARY_KEYWORDS:
                    value = parse_value(card[10:])
                else:
                    text = card[8:].rstrip()
                    if keyword == "HISTORY":
                        history.append(text.strip())
                    elif text or keyword:
                        comments.append(text.strip())
                    continue

                if keyword in headers:
                    logger.warning(
                        "重复的头部关键字 %s（偏移 %d），保留最后一次取值", keyword, page.offset
                    )
                headers[keyword] = value

    # ---------- Mapping 接口 ----------

    def __getitem__(self, key: str) -> str:
        return self._headers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"HeaderUnit({self._headers!r})"

    @property
    def comments(self) -> List[str]:
        return list(self._comments)

    @property
    def history(self) -> List[str]:
        return list(self._history)

    # ---------- 取值 ----------

    def header(self, key: str, default: Optional[str] = _MISSING) -> str:
        """返回原始字符串；无默认值且关键字不存在时抛出 KeyError。"""
        if default is _MISSING:
            return self._headers[key]
        return self._headers.get(key, default)

    def header_as(self, key: str, value_type: type, default=_MISSING):
        """
        按类型取值（int / float / bool / str）。
        - 无默认值：关键字不存在抛 KeyError，无法转换抛 WrongHeaderValue
        - 有默认值：关键字不存在或无法转换时返回默认值
        """
        if default is _MISSING:
            value = self._headers[key]
            try:
                return convert_value(value, value_type)
            except (TypeError, ValueError):
                raise WrongHeaderValue(key, value) from None

        value = self._headers.get(key)
        if value is None:
            return default
        try:
            return convert_value(value, value_type)
        except (TypeError, ValueError):
            return default

    @property
    def bscale(self) -> float:
        return self.header_as("BSCALE", float, 1.0)

    @property
    def bzero(self) -> float:
        return self.header_as("BZERO", float, 0.0)
