# -*- coding: utf-8 -*-
import io

import pytest

from models import BLOCK_SIZE, FITSStorage, UnexpectedEnd


def test_advance_returns_full_blocks_and_moves_position():
    storage = FITSStorage.from_bytes(b"a" * BLOCK_SIZE + b"b" * BLOCK_SIZE)

    page = storage.advance(1)
    assert len(page) == BLOCK_SIZE
    assert page.offset == 0
    assert bytes(page.data[:1]) == b"a"
    assert storage.position == BLOCK_SIZE

    page = storage.advance(1)
    assert page.offset == BLOCK_SIZE
    assert bytes(page.data[:1]) == b"b"
    assert storage.at_end()


def test_advance_past_end_raises():
    storage = FITSStorage.from_bytes(b"x" * (BLOCK_SIZE + 100))
    storage.advance(1)
    with pytest.raises(UnexpectedEnd):
        storage.advance(1)


def test_advance_bytes_consumes_padding_but_hides_it():
    storage = FITSStorage.from_bytes(b"\x07" * 10 + b"\0" * (BLOCK_SIZE - 10) + b"z" * BLOCK_SIZE)
    page = storage.advance_bytes(10)
    assert len(page) == 10
    assert page.block_count == 1
    assert storage.position == BLOCK_SIZE
    assert bytes(storage.advance(1).data[:1]) == b"z"


def test_at_end_does_not_lose_bytes():
    storage = FITSStorage(io.BytesIO(b"q" * BLOCK_SIZE))
    assert not storage.at_end()
    assert not storage.at_end()
    page = storage.advance(1)
    assert bytes(page.data) == b"q" * BLOCK_SIZE
    assert storage.at_end()


def test_cards_split_block_into_80_byte_records():
    storage = FITSStorage.from_bytes(b" " * BLOCK_SIZE)
    cards = list(storage.advance(1).cards())
    assert len(cards) == 36
    assert all(len(c) == 80 for c in cards)


def test_reads_from_chunked_stream():
    class Trickle(io.RawIOBase):
        def __init__(self, data):
            self._data = data

        def readable(self):
            return True

        def read(self, n=-1):
            size = 7 if n < 0 else min(7, n)
            chunk, self._data = self._data[:size], self._data[size:]
            return chunk

    storage = FITSStorage(Trickle(b"k" * (2 * BLOCK_SIZE)))
    assert len(storage.advance(2)) == 2 * BLOCK_SIZE
    assert storage.at_end()
