#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from sg_names import CaseTag, IdentName, NamingConvention, classify, render, segment


@pytest.mark.parametrize(
    "ident, expected",
    [
        ("lower", ["lower"]),
        ("UPPER", ["UPPER"]),
        ("Capital", ["Capital"]),
        ("under_score", ["under", "score"]),
        ("USBDriver", ["USB", "Driver"]),
        ("USB_Driver", ["USB", "Driver"]),
        ("camelCase", ["camel", "Case"]),
        ("camelCase123", ["camel", "Case123"]),
        ("USB2Driver", ["USB2", "Driver"]),
        ("Usb2Driver", ["Usb2", "Driver"]),
        ("usb2_driver", ["usb2", "driver"]),
        ("USB2driver", ["USB2", "driver"]),
        ("HTTPServerError", ["HTTP", "Server", "Error"]),
        ("getHTTPResponse", ["get", "HTTP", "Response"]),
        ("A", ["A"]),
        ("AB", ["AB"]),
        ("ABc", ["A", "Bc"]),
        ("x", ["x"]),
    ],
)
def test_segment(ident, expected):
    assert segment(ident) == expected


@pytest.mark.parametrize(
    "ident, expected",
    [
        ("_leading", ["leading"]),
        ("trailing_", ["trailing"]),
        ("double__under", ["double", "under"]),
        ("__", []),
        ("", []),
        ("_Private_Field_", ["Private", "Field"]),
    ],
)
def test_segment_underscores_never_produce_empty_tokens(ident, expected):
    assert segment(ident) == expected


@pytest.mark.parametrize(
    "token, tag",
    [
        ("lower", CaseTag.ALL_LOWER),
        ("UPPER", CaseTag.ALL_UPPER),
        ("Capital", CaseTag.CAPITAL_FIRST),
        ("Case123", CaseTag.CAPITAL_FIRST),
        ("USB2", CaseTag.ALL_UPPER),
        ("Usb2", CaseTag.CAPITAL_FIRST),
        ("usb2", CaseTag.ALL_LOWER),
        ("123", CaseTag.ALL_LOWER),
    ],
)
def test_classify(token, tag):
    assert classify(token) is tag


def test_render_pascal_and_snake():
    name = IdentName.from_str("USBDriver")

    assert name.render(NamingConvention.PASCAL_CASE) == "USBDriver"
    assert name.render(NamingConvention.SNAKE_CASE) == "usb_driver"


def test_render_does_not_resplit_tokens():
    parts = IdentName.from_str("camelCase123").parts

    assert render(parts, NamingConvention.PASCAL_CASE) == "CamelCase123"
    assert render(parts, NamingConvention.SNAKE_CASE) == "camel_case123"


@pytest.mark.parametrize(
    "ident, class_name, file_name",
    [
        ("Shape", "Shape", "shape"),
        ("decoder_status", "DecoderStatus", "decoder_status"),
        ("NMEAMessage", "NMEAMessage", "nmea_message"),
        ("ipv4_addr", "Ipv4Addr", "ipv4_addr"),
        ("MyUSB2Port", "MyUSB2Port", "my_usb2_port"),
    ],
)
def test_naming_conventions(ident, class_name, file_name):
    name = IdentName.from_str(ident)

    assert name.to_class_name() == class_name
    assert name.to_enum_variant_name() == class_name
    assert name.to_file_name() == file_name
    assert name.to_public_member_name() == file_name


def test_empty_identifier_renders_empty():
    name = IdentName.from_str("")

    assert name.parts == ()
    assert name.to_class_name() == ""
    assert name.to_file_name() == ""


@pytest.mark.parametrize(
    "ident",
    ["USBDriver", "camelCase123", "Usb2Driver", "HTTPServerError", "already_snake", "X", "ABc", "USB2driver"],
)
def test_snake_case_resegments_to_same_lowercase_tokens(ident):
    tokens = segment(ident)
    snake = IdentName.from_str(ident).to_file_name()

    assert segment(snake) == [t.lower() for t in tokens]


def test_ident_name_is_value_type():
    assert IdentName.from_str("USB_Driver") == IdentName.from_str("USBDriver")
    assert hash(IdentName.from_str("a_b")) == hash(IdentName.from_str("a_b"))
