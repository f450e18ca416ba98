"""Distinguished names: parsing, normalised string forms and matching."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ber import decode_packet

_BACKSLASH = ord("\\")
_EQUALS = ord("=")
_HASH = ord("#")
_SPACE = ord(" ")
_COMMA = ord(",")
_PLUS = ord("+")
_SEMICOLON = ord(";")

_ESCAPABLE = frozenset(b' "#+,;<=>\\')
_ALWAYS_ESCAPED = frozenset(b'"+,;<>\\')
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


class DNParseError(ValueError):
    """Raised when a distinguished name cannot be parsed."""


class _HexError(ValueError):
    pass


def _to_bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _to_text(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _invalid_hex_byte(byte: int) -> _HexError:
    char = chr(byte)
    shown = f"U+{byte:04X} '{char}'" if char.isprintable() else f"U+{byte:04X}"
    return _HexError(f"encoding/hex: invalid byte: {shown}")


def _hex_decode(src: bytes) -> bytes:
    """Strict hex decoding that reports errors the way the wire format expects."""
    out = bytearray()
    for pos in range(0, len(src) - 1, 2):
        for byte in src[pos:pos + 2]:
            if byte not in _HEX_DIGITS:
                raise _invalid_hex_byte(byte)
        out.append(int(src[pos:pos + 2], 16))
    if len(src) % 2:
        if src[-1] not in _HEX_DIGITS:
            raise _invalid_hex_byte(src[-1])
        raise _HexError("encoding/hex: odd length hex string")
    return bytes(out)


def _equal_fold(left: str, right: str) -> bool:
    if left == right:
        return True
    if len(left) != len(right):
        return False
    return all(
        a == b or a.lower() == b.lower() or a.upper() == b.upper()
        for a, b in zip(left, right)
    )


@dataclass
class AttributeTypeAndValue:
    """One ``type=value`` pair of a relative distinguished name."""

    type: str = ""
    value: str = ""

    def __str__(self) -> str:
        return f"{self.type.lower()}={self._encode_value()}"

    def _encode_value(self) -> str:
        raw = _to_bytes(self.value)
        last = len(raw) - 1
        parts = []
        for index, byte in enumerate(raw):
            if (index == 0 and byte == _SPACE) or byte == _HASH:
                parts.append("\\" + chr(byte))
            elif index == last and byte == _SPACE:
                parts.append("\\ ")
            elif byte in _ALWAYS_ESCAPED:
                parts.append("\\" + chr(byte))
            elif byte < 0x20 or byte > 0x7E:
                parts.append(f"\\{byte:02x}")
            else:
                parts.append(chr(byte))
        return "".join(parts)

    def equal(self, other: "AttributeTypeAndValue") -> bool:
        """Types match case-insensitively, values exactly."""
        return _equal_fold(self.type, other.type) and self.value == other.value

    def equal_fold(self, other: "AttributeTypeAndValue") -> bool:
        """Types and values both match case-insensitively."""
        return _equal_fold(self.type, other.type) and _equal_fold(self.value, other.value)


@dataclass
class RelativeDN:
    """A relative distinguished name: one or more attribute pairs joined by ``+``."""

    attributes: list = field(default_factory=list)

    def __str__(self) -> str:
        return "+".join(sorted(str(attr) for attr in self.attributes))

    def _has_all(self, attrs: list, fold: bool) -> bool:
        if fold:
            return all(any(mine.equal_fold(attr) for mine in self.attributes) for attr in attrs)
        return all(any(mine.equal(attr) for mine in self.attributes) for attr in attrs)

    def equal(self, other: "RelativeDN") -> bool:
        """Same attribute pairs in any order; attribute type case is ignored."""
        if len(self.attributes) != len(other.attributes):
            return False
        return self._has_all(other.attributes, False) and other._has_all(self.attributes, False)

    def equal_fold(self, other: "RelativeDN") -> bool:
        """Like :meth:`equal`, but values are also compared case-insensitively."""
        if len(self.attributes) != len(other.attributes):
            return False
        return self._has_all(other.attributes, True) and other._has_all(self.attributes, True)


@dataclass
class DN:
    """A distinguished name: a sequence of relative DNs, most specific first."""

    rdns: list = field(default_factory=list)

    def __str__(self) -> str:
        return ",".join(str(rdn) for rdn in self.rdns)

    def equal(self, other: "DN") -> bool:
        """Distinguished name match with case-sensitive values."""
        if len(self.rdns) != len(other.rdns):
            return False
        return all(mine.equal(theirs) for mine, theirs in zip(self.rdns, other.rdns))

    def equal_fold(self, other: "DN") -> bool:
        """Distinguished name match ignoring the case of types and values."""
        if len(self.rdns) != len(other.rdns):
            return False
        return all(mine.equal_fold(theirs) for mine, theirs in zip(self.rdns, other.rdns))

    def ancestor_of(self, other: "DN") -> bool:
        """True if ``other`` is strictly below this DN in the tree."""
        if len(self.rdns) >= len(other.rdns):
            return False
        tail = other.rdns[len(other.rdns) - len(self.rdns):]
        return all(mine.equal(theirs) for mine, theirs in zip(self.rdns, tail))

    def ancestor_of_fold(self, other: "DN") -> bool:
        """Like :meth:`ancestor_of`, ignoring the case of types and values."""
        if len(self.rdns) >= len(other.rdns):
            return False
        tail = other.rdns[len(other.rdns) - len(self.rdns):]
        return all(mine.equal_fold(theirs) for mine, theirs in zip(self.rdns, tail))


def _decode_ber_value(data: bytes) -> bytes:
    try:
        raw = _hex_decode(data)
    except _HexError as exc:
        raise DNParseError(f"failed to decode BER encoding: {exc}") from None
    try:
        packet = decode_packet(raw)
    except ValueError as exc:
        raise DNParseError(f"failed to decode BER packet: {exc}") from None
    return packet.data


def parse_dn(text: str) -> DN:
    """Parse a string DN as described by RFC 4514."""
    raw = _to_bytes(text)
    length = len(raw)
    dn = DN()
    rdn = RelativeDN()
    attr_type = ""
    buffer = bytearray()
    trailing_spaces = 0
    escaping = False

    def take() -> str:
        nonlocal trailing_spaces
        value = _to_text(bytes(buffer[:len(buffer) - trailing_spaces]))
        buffer.clear()
        trailing_spaces = 0
        return value

    i = 0
    while i < length:
        char = raw[i]
        if escaping:
            trailing_spaces = 0
            escaping = False
            if char in _ESCAPABLE:
                buffer.append(char)
            else:
                if length == i + 1:
                    raise DNParseError("got corrupted escaped character")
                try:
                    buffer += _hex_decode(raw[i:i + 2])
                except _HexError as exc:
                    raise DNParseError(f"failed to decode escaped character: {exc}") from None
                i += 1
        elif char == _BACKSLASH:
            trailing_spaces = 0
            escaping = True
        elif char == _EQUALS:
            attr_type = take()
            if i + 1 < length and raw[i + 1] == _HASH:
                i += 2
                rest = raw[i:]
                found = [pos for pos in (rest.find(b","), rest.find(b"+")) if pos >= 0]
                index = min(found, default=-1)
                data = rest[:index] if index > 0 else rest
                buffer += _decode_ber_value(data)
                i += len(data) - 1
        elif char in (_COMMA, _PLUS, _SEMICOLON):
            if not attr_type:
                raise DNParseError("incomplete type, value pair")
            rdn.attributes.append(AttributeTypeAndValue(attr_type, take()))
            attr_type = ""
            if char != _PLUS:
                dn.rdns.append(rdn)
                rdn = RelativeDN()
        elif char == _SPACE and not buffer:
            pass
        else:
            trailing_spaces = trailing_spaces + 1 if char == _SPACE else 0
            buffer.append(char)
        i += 1

    if buffer:
        if not attr_type:
            raise DNParseError("DN ended with incomplete type, value pair")
        rdn.attributes.append(AttributeTypeAndValue(attr_type, take()))
        dn.rdns.append(rdn)
    return dn