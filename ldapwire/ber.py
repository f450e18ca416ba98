"""A small BER (X.690) packet model: building, encoding and decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union


class BERError(ValueError):
    """Raised when BER data cannot be decoded."""


class ClassType(IntEnum):
    """The class bits of a BER identifier octet."""

    UNIVERSAL = 0x00
    APPLICATION = 0x40
    CONTEXT = 0x80
    PRIVATE = 0xC0


class TagType(IntEnum):
    """The primitive/constructed bit of a BER identifier octet."""

    PRIMITIVE = 0x00
    CONSTRUCTED = 0x20


class Tag(IntEnum):
    """Universal tag numbers."""

    EOC = 0
    BOOLEAN = 1
    INTEGER = 2
    BIT_STRING = 3
    OCTET_STRING = 4
    NULL = 5
    OBJECT_IDENTIFIER = 6
    OBJECT_DESCRIPTOR = 7
    EXTERNAL = 8
    REAL = 9
    ENUMERATED = 10
    EMBEDDED_PDV = 11
    UTF8_STRING = 12
    RELATIVE_OID = 13
    SEQUENCE = 16
    SET = 17
    NUMERIC_STRING = 18
    PRINTABLE_STRING = 19
    T61_STRING = 20
    VIDEOTEX_STRING = 21
    IA5_STRING = 22
    UTC_TIME = 23
    GENERALIZED_TIME = 24
    GRAPHIC_STRING = 25
    VISIBLE_STRING = 26
    GENERAL_STRING = 27
    UNIVERSAL_STRING = 28
    CHARACTER_STRING = 29
    BMP_STRING = 30


_STRING_TAGS = frozenset(
    {
        Tag.OCTET_STRING,
        Tag.OBJECT_DESCRIPTOR,
        Tag.UTF8_STRING,
        Tag.NUMERIC_STRING,
        Tag.PRINTABLE_STRING,
        Tag.T61_STRING,
        Tag.VIDEOTEX_STRING,
        Tag.IA5_STRING,
        Tag.UTC_TIME,
        Tag.GENERALIZED_TIME,
        Tag.GRAPHIC_STRING,
        Tag.VISIBLE_STRING,
        Tag.GENERAL_STRING,
        Tag.UNIVERSAL_STRING,
        Tag.CHARACTER_STRING,
        Tag.BMP_STRING,
    }
)


def _bytes_to_str(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _str_to_bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


@dataclass
class Packet:
    """One BER element; primitive content lives in ``data``, constructed in ``children``."""

    class_type: ClassType = ClassType.UNIVERSAL
    tag_type: TagType = TagType.PRIMITIVE
    tag: int = 0
    value: object = None
    data: bytes = b""
    description: str = ""
    children: list = field(default_factory=list)

    @property
    def constructed(self) -> bool:
        return self.tag_type == TagType.CONSTRUCTED

    def append_child(self, child: "Packet") -> None:
        """Add a child element to a constructed packet."""
        self.children.append(child)

    def to_bytes(self) -> bytes:
        """Encode this packet and its children with definite lengths."""
        if self.constructed:
            content = b"".join(child.to_bytes() for child in self.children)
        else:
            content = bytes(self.data)
        return _encode_identifier(self.class_type, self.tag_type, self.tag) + _encode_length(len(content)) + content


def _encode_identifier(class_type: int, tag_type: int, tag: int) -> bytes:
    if tag < 0:
        raise BERError(f"negative tag number {tag}")
    lead = int(class_type) | int(tag_type)
    if tag < 0x1F:
        return bytes([lead | tag])
    groups = []
    while True:
        groups.append(tag & 0x7F)
        tag >>= 7
        if not tag:
            break
    groups.reverse()
    encoded = [g | 0x80 for g in groups[:-1]] + [groups[-1]]
    return bytes([lead | 0x1F, *encoded])


def _encode_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    raw = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(raw)]) + raw


def _encode_integer(value: int) -> bytes:
    magnitude = value if value >= 0 else ~value
    size = (magnitude.bit_length() + 8) // 8
    return value.to_bytes(size, "big", signed=True)


def _read_length(buf: bytes, pos: int, limit: int) -> tuple[int, int]:
    if pos >= limit:
        raise BERError("unexpected end of data reading length")
    first = buf[pos]
    pos += 1
    if first < 0x80:
        return first, pos
    if first == 0x80:
        raise BERError("indefinite length is not supported")
    count = first & 0x7F
    if pos + count > limit:
        raise BERError("unexpected end of data reading length")
    return int.from_bytes(buf[pos:pos + count], "big"), pos + count


def _primitive_value(class_type: ClassType, tag: int, content: bytes) -> object:
    if class_type != ClassType.UNIVERSAL:
        return None
    if tag == Tag.BOOLEAN:
        if not content:
            raise BERError("boolean with no content")
        return content[0] != 0
    if tag in (Tag.INTEGER, Tag.ENUMERATED):
        return int.from_bytes(content, "big", signed=True) if content else 0
    if tag in _STRING_TAGS:
        return _bytes_to_str(content)
    return None


def _read_packet(buf: bytes, pos: int, limit: int) -> tuple[Packet, int]:
    if pos >= limit:
        raise BERError("unexpected end of data reading identifier")
    first = buf[pos]
    pos += 1
    class_type = ClassType(first & 0xC0)
    tag_type = TagType(first & 0x20)
    tag = first & 0x1F
    if tag == 0x1F:
        tag = 0
        while True:
            if pos >= limit:
                raise BERError("unexpected end of data reading tag")
            octet = buf[pos]
            pos += 1
            tag = (tag << 7) | (octet & 0x7F)
            if not octet & 0x80:
                break
    length, pos = _read_length(buf, pos, limit)
    end = pos + length
    if end > limit:
        raise BERError(f"content length {length} exceeds available data")
    packet = Packet(class_type=class_type, tag_type=tag_type, tag=tag)
    if tag_type == TagType.CONSTRUCTED:
        while pos < end:
            child, pos = _read_packet(buf, pos, end)
            packet.children.append(child)
    else:
        content = bytes(buf[pos:end])
        packet.data = content
        packet.value = _primitive_value(class_type, tag, content)
    return packet, end


def decode_packet(data: bytes) -> Packet:
    """Decode the first BER element in ``data``."""
    buf = bytes(data)
    packet, _ = _read_packet(buf, 0, len(buf))
    return packet


def new_string(class_type: int, tag_type: int, tag: int, value: Union[str, bytes], description: str) -> Packet:
    """Build a primitive string packet from text or raw bytes."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
        text = _bytes_to_str(raw)
    else:
        text = value
        raw = _str_to_bytes(value)
    return Packet(ClassType(class_type), TagType(tag_type), int(tag), text, raw, description)


def new_integer(class_type: int, tag_type: int, tag: int, value: int, description: str) -> Packet:
    """Build a primitive two's-complement integer packet."""
    number = int(value)
    return Packet(ClassType(class_type), TagType(tag_type), int(tag), number, _encode_integer(number), description)


def new_boolean(class_type: int, tag_type: int, tag: int, value: bool, description: str) -> Packet:
    """Build a primitive boolean packet (true encodes as 0x01)."""
    flag = bool(value)
    return Packet(ClassType(class_type), TagType(tag_type), int(tag), flag, b"\x01" if flag else b"\x00", description)


def new_constructed(class_type: int, tag: int, description: str) -> Packet:
    """Build an empty constructed packet."""
    return Packet(ClassType(class_type), TagType.CONSTRUCTED, int(tag), None, b"", description)


def new_sequence(description: str) -> Packet:
    """Build an empty universal SEQUENCE packet."""
    return new_constructed(ClassType.UNIVERSAL, Tag.SEQUENCE, description)