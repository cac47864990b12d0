# -*- coding: utf-8 -*-
"""
FITS 分页字节源（Model）。
按固定大小的块（2880 字节）顺序读取底层二进制流，不需要整份文件驻留内存，也不支持回退。
每次前进返回一个 Page，Page 持有本次读入的字节缓冲区，数据单元以零拷贝视图借用它。
"""

import io
from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from .errors import UnexpectedEnd

# FITS 标准规定的逻辑记录长度
BLOCK_SIZE = 2880
CARD_SIZE = 80
CARDS_PER_BLOCK = BLOCK_SIZE // CARD_SIZE


@dataclass(frozen=True)
class Page:
    """
    连续若干块的只读视图。
    - data：本页有效字节（advance_bytes 时已去掉块尾填充）
    - offset：data 首字节在流中的位置
    - block_count：本页实际消耗的块数
    """

    data: memoryview
    offset: int
    block_count: int

    def __len__(self) -> int:
        return len(self.data)

    def cards(self) -> Iterator[bytes]:
        """按 80 字节切分卡片记录。"""
        for start in range(0, len(self.data) - CARD_SIZE + 1, CARD_SIZE):
            yield bytes(self.data[start:start + CARD_SIZE])


class FITSStorage:
    """
    顺序、只前进的分页字节源。
    - advance(n)：返回接下来 n 个完整块，不足时抛出 UnexpectedEnd
    - advance_bytes(length)：消耗 length 向上取整到块边界的字节，只暴露前 length 字节
    - at_end()：流是否已耗尽
    """

    def __init__(self, stream: BinaryIO, owns_stream: bool = False):
        self._stream = stream
        self._owns_stream = owns_stream
        self._position = 0
        # at_end() 预读出的字节，下次读取时拼在最前面
        self._lookahead = b""

    @classmethod
    def open(cls, path: Union[str, Path]) -> "FITSStorage":
        return cls(open(path, "rb"), owns_stream=True)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FITSStorage":
        return cls(io.BytesIO(bytes(data)), owns_stream=True)

    @property
    def position(self) -> int:
        """已消耗的字节数，始终是块大小的整数倍。"""
        return self._position

    def _read(self, length: int) -> bytes:
        chunks = [self._lookahead] if self._lookahead else []
        remaining = length - len(self._lookahead)
        self._lookahead = b""
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def advance(self, n_blocks: int = 1) -> Page:
        if n_blocks < 0:
            raise ValueError(f"块数不能为负：{n_blocks}")
        length = n_blocks * BLOCK_SIZE
        buffer = self._read(length)
        if len(buffer) < length:
            raise UnexpectedEnd(
                f"FITS 文件意外结束：位置 {self._position} 处需要 {length} 字节，仅剩 {len(buffer)} 字节"
            )
        page = Page(memoryview(buffer), self._position, n_blocks)
        self._position += length
        return page

    def advance_bytes(self, length: int) -> Page:
        n_blocks = -(-length // BLOCK_SIZE)
        page = self.advance(n_blocks)
        return replace(page, data=page.data[:length])

    def at_end(self) -> bool:
        if self._lookahead:
            return False
        self._lookahead = self._stream.read(1) or b""
        return not self._lookahead

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()
