# -*- coding: utf-8 -*-
import logging

import pytest

from fits_builder import card, header_block
from models import FITSStorage, HeaderUnit, UnexpectedEnd, WrongHeaderValue
from models.header_unit import parse_value


def parse(data: bytes) -> HeaderUnit:
    return HeaderUnit.parse(FITSStorage.from_bytes(data))


def test_minimal_header_has_exactly_three_keys():
    header = parse(header_block([("SIMPLE", "T"), ("BITPIX", "16"), ("NAXIS", "0")]))
    assert list(header) == ["SIMPLE", "BITPIX", "NAXIS"]
    assert len(header) == 3
    assert "END" not in header
    assert header["BITPIX"] == "16"


def test_parse_consumes_whole_block_after_end():
    storage = FITSStorage.from_bytes(header_block([("SIMPLE", "T")]) + b"\0" * 2880)
    HeaderUnit.parse(storage)
    assert storage.position == 2880


def test_header_spanning_several_blocks():
    cards = [(f"KEY{i}", str(i)) for i in range(50)]
    storage = FITSStorage.from_bytes(header_block(cards))
    header = HeaderUnit.parse(storage)
    assert len(header) == 50
    assert header["KEY49"] == "49"
    assert storage.position == 2 * 2880


def test_missing_end_raises_unexpected_end():
    data = card("SIMPLE", "T").ljust(2880, b" ")
    with pytest.raises(UnexpectedEnd):
        parse(data)


def test_commentary_cards_are_not_keys():
    raw = [card("COMMENT", None, "  first note"), card("HISTORY", None, "  reduced")]
    header = parse(header_block([("SIMPLE", "T")], raw))
    assert list(header) == ["SIMPLE"]
    assert header.comments == ["first note"]
    assert header.history == ["reduced"]


@pytest.mark.parametrize(
    "field, expected",
    [
        ("                   42 / answer", "42"),
        ("'IMAGE   '", "IMAGE"),
        ("'O''Brien' / name", "O'Brien"),
        ("'a / b'", "a / b"),
        ("                    T", "T"),
        ("   1.5D3", "1.5D3"),
    ],
)
def test_parse_value(field, expected):
    assert parse_value(field) == expected


def test_header_as_converts_types():
    header = HeaderUnit({"NAXIS": "2", "BSCALE": "1.5D1", "SIMPLE": "T", "EXTEND": "F"})
    assert header.header_as("NAXIS", int) == 2
    assert header.header_as("BSCALE", float) == 15.0
    assert header.header_as("SIMPLE", bool) is True
    assert header.header_as("EXTEND", bool) is False


def test_header_as_raises_wrong_header_value():
    header = HeaderUnit({"NAXIS": "two"})
    with pytest.raises(WrongHeaderValue) as excinfo:
        header.header_as("NAXIS", int)
    assert excinfo.value.key == "NAXIS"
    assert excinfo.value.value == "two"


def test_header_as_with_default():
    header = HeaderUnit({"BSCALE": "oops"})
    assert header.header_as("BSCALE", float, 1.0) == 1.0
    assert header.header_as("MISSING", int, 7) == 7
    with pytest.raises(KeyError):
        header.header_as("MISSING", int)


def test_bscale_bzero_defaults():
    header = HeaderUnit({})
    assert header.bscale == 1.0
    assert header.bzero == 0.0
    header = HeaderUnit({"BSCALE": "2.0", "BZERO": "32768"})
    assert header.bscale == 2.0
    assert header.bzero == 32768.0


def test_header_with_default():
    header = HeaderUnit({"OBJECT": "M31"})
    assert header.header("OBJECT") == "M31"
    assert header.header("TELESCOP", "-") == "-"
    with pytest.raises(KeyError):
        header.header("TELESCOP")


def test_repeated_keyword_keeps_last_value(caplog):
    data = header_block([("SIMPLE", "T"), ("OBJECT", "'M31'"), ("OBJECT", "'M33'")])
    with caplog.at_level(logging.WARNING, logger="models.header_unit"):
        header = parse(data)
    assert header["OBJECT"] == "M33"
    assert list(header) == ["SIMPLE", "OBJECT"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "OBJECT" in warnings[0].getMessage()


def test_hierarch_card():
    raw = [b"HIERARCH ESO DET CHIP NAME = 'CCD-1' / detector".ljust(80)]
    header = parse(header_block([("SIMPLE", "T")], raw))
    assert header["ESO DET CHIP NAME"] == "CCD-1"
    assert list(header) == ["SIMPLE", "ESO DET CHIP NAME"]
