"""Search filters: compiling the RFC 4515 string form to BER and back."""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from .ber import (
    ClassType,
    Packet,
    Tag,
    TagType,
    new_boolean,
    new_constructed,
    new_string,
)
from .errors import LDAPError, ResultCode


class FilterType(IntEnum):
    """Filter CHOICE tags (CONTEXT class)."""

    AND = 0
    OR = 1
    NOT = 2
    EQUALITY_MATCH = 3
    SUBSTRINGS = 4
    GREATER_OR_EQUAL = 5
    LESS_OR_EQUAL = 6
    PRESENT = 7
    APPROX_MATCH = 8
    EXTENSIBLE_MATCH = 9

    @property
    def description(self) -> str:
        return _FILTER_DESCRIPTIONS[self]


_FILTER_DESCRIPTIONS = {
    FilterType.AND: "And",
    FilterType.OR: "Or",
    FilterType.NOT: "Not",
    FilterType.EQUALITY_MATCH: "Equality Match",
    FilterType.SUBSTRINGS: "Substrings",
    FilterType.GREATER_OR_EQUAL: "Greater Or Equal",
    FilterType.LESS_OR_EQUAL: "Less Or Equal",
    FilterType.PRESENT: "Present",
    FilterType.APPROX_MATCH: "Approx Match",
    FilterType.EXTENSIBLE_MATCH: "Extensible Match",
}


class SubstringType(IntEnum):
    """Tags of the parts of a substring filter."""

    INITIAL = 0
    ANY = 1
    FINAL = 2

    @property
    def description(self) -> str:
        return f"Substrings {self.name.capitalize()}"


class MatchingRuleAssertion(IntEnum):
    """Tags of the fields of an extensible match assertion."""

    MATCHING_RULE = 1
    TYPE = 2
    MATCH_VALUE = 3
    DN_ATTRIBUTES = 4

    @property
    def description(self) -> str:
        return _MRA_DESCRIPTIONS[self]


_MRA_DESCRIPTIONS = {
    MatchingRuleAssertion.MATCHING_RULE: "Matching Rule Assertion Matching Rule",
    MatchingRuleAssertion.TYPE: "Matching Rule Assertion Type",
    MatchingRuleAssertion.MATCH_VALUE: "Matching Rule Assertion Match Value",
    MatchingRuleAssertion.DN_ATTRIBUTES: "Matching Rule Assertion DN Attributes",
}

_RUNE_ERROR = 0xFFFD
_SYMBOL_ANY = b"*"
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_LOWER_HEX = "0123456789abcdef"

_READING_ATTR = 0
_READING_RULE = 1
_READING_CONDITION = 2


def _compile_error(message: str) -> LDAPError:
    return LDAPError(ResultCode.ERROR_FILTER_COMPILE, message)


def _to_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


def _decode_rune(buf: bytes, pos: int) -> tuple[int, int]:
    """Decode one UTF-8 character; invalid input yields U+FFFD with width 1."""
    if pos >= len(buf):
        return _RUNE_ERROR, 0
    lead = buf[pos]
    if lead < 0x80:
        return lead, 1
    if 0xC2 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF4:
        size = 4
    else:
        return _RUNE_ERROR, 1
    try:
        char = buf[pos:pos + size].decode("utf-8")
    except UnicodeDecodeError:
        return _RUNE_ERROR, 1
    return ord(char), size


def _describe_byte(byte: int) -> str:
    char = chr(byte)
    return f"U+{byte:04X} '{char}'" if char.isprintable() else f"U+{byte:04X}"


def decode_escaped_symbols(src: Union[str, bytes, bytearray]) -> bytes:
    """Turn ``\\xx`` escapes of a filter value into the literal bytes they stand for."""
    data = _to_bytes(src)
    out = bytearray()
    pos = 0
    offset = 0
    while pos < len(data):
        rune, width = _decode_rune(data, pos)
        if rune == _RUNE_ERROR:
            raise _compile_error(f"ldap: error reading rune at position {offset}")
        pos += width
        if rune == ord("\\"):
            pair = data[pos:pos + 2]
            if not pair:
                raise _compile_error("ldap: invalid characters for escape in filter: EOF")
            if len(pair) == 1:
                raise _compile_error("ldap: missing characters for escape in filter")
            for byte in pair:
                if byte not in _HEX_DIGITS:
                    raise _compile_error(
                        "ldap: invalid characters for escape in filter: "
                        f"encoding/hex: invalid byte: {_describe_byte(byte)}"
                    )
            out += bytes.fromhex(pair.decode("ascii"))
            pos += 2
        else:
            out += data[pos - width:pos]
        offset += width
    return bytes(out)


def _escape_filter(value: bytes) -> bytes:
    """Hex-escape the bytes that may not appear literally in a filter value."""
    parts = []
    for byte in value:
        if byte > 0x7F or byte in b"()\\*" or byte == 0:
            parts.append("\\" + _LOWER_HEX[byte >> 4] + _LOWER_HEX[byte & 0xF])
        else:
            parts.append(chr(byte))
    return "".join(parts).encode("latin-1")


class _FilterCompiler:
    def __init__(self, buf: bytes) -> None:
        self.buf = buf

    def compile_set(self, pos: int, parent: Packet) -> int:
        buf = self.buf
        while pos < len(buf) and buf[pos] == ord("("):
            child, pos = self.compile(pos + 1)
            parent.append_child(child)
        if pos == len(buf):
            raise _compile_error("ldap: unexpected end of filter")
        return pos + 1

    def compile(self, pos: int) -> tuple[Packet, int]:
        buf = self.buf
        if pos > len(buf):
            raise _compile_error("ldap: unexpected end of filter")
        rune, width = _decode_rune(buf, pos)
        if rune == _RUNE_ERROR:
            raise _compile_error(f"ldap: error reading rune at position {pos}")
        if rune == ord("("):
            packet, new_pos = self.compile(pos + width)
            return packet, new_pos + 1
        if rune in (ord("&"), ord("|")):
            kind = FilterType.AND if rune == ord("&") else FilterType.OR
            packet = new_constructed(ClassType.CONTEXT, kind, kind.description)
            return packet, self.compile_set(pos + width, packet)
        if rune == ord("!"):
            packet = new_constructed(ClassType.CONTEXT, FilterType.NOT, FilterType.NOT.description)
            child, new_pos = self.compile(pos + width)
            packet.append_child(child)
            return packet, new_pos
        return self._compile_item(pos)

    def _compile_item(self, pos: int) -> tuple[Packet, int]:
        buf = self.buf
        state = _READING_ATTR
        kind = None
        dn_attributes = False
        attribute = bytearray()
        rule = bytearray()
        condition = bytearray()
        width = 0
        new_pos = pos

        while new_pos < len(buf):
            rest = buf[new_pos:]
            rune, width = _decode_rune(buf, new_pos)
            if rune == ord(")"):
                break
            if rune == _RUNE_ERROR:
                raise _compile_error(f"ldap: error reading rune at position {new_pos}")
            piece = buf[new_pos:new_pos + width]

            if state == _READING_ATTR:
                if rune == ord(":") and rest.startswith(b":dn:="):
                    kind, dn_attributes, state = FilterType.EXTENSIBLE_MATCH, True, _READING_CONDITION
                    new_pos += 5
                elif rune == ord(":") and rest.startswith(b":dn:"):
                    kind, dn_attributes, state = FilterType.EXTENSIBLE_MATCH, True, _READING_RULE
                    new_pos += 4
                elif rune == ord(":") and rest.startswith(b":="):
                    kind, state = FilterType.EXTENSIBLE_MATCH, _READING_CONDITION
                    new_pos += 2
                elif rune == ord(":"):
                    kind, state = FilterType.EXTENSIBLE_MATCH, _READING_RULE
                    new_pos += 1
                elif rune == ord("="):
                    kind, state = FilterType.EQUALITY_MATCH, _READING_CONDITION
                    new_pos += 1
                elif rune == ord(">") and rest.startswith(b">="):
                    kind, state = FilterType.GREATER_OR_EQUAL, _READING_CONDITION
                    new_pos += 2
                elif rune == ord("<") and rest.startswith(b"<="):
                    kind, state = FilterType.LESS_OR_EQUAL, _READING_CONDITION
                    new_pos += 2
                elif rune == ord("~") and rest.startswith(b"~="):
                    kind, state = FilterType.APPROX_MATCH, _READING_CONDITION
                    new_pos += 2
                else:
                    attribute += piece
                    new_pos += width
            elif state == _READING_RULE:
                if rune == ord(":") and rest.startswith(b":="):
                    state = _READING_CONDITION
                    new_pos += 2
                else:
                    rule += piece
                    new_pos += width
            else:
                condition += piece
                new_pos += width

        if new_pos == len(buf):
            raise _compile_error("ldap: unexpected end of filter")
        if kind is None:
            raise _compile_error("ldap: error parsing filter")

        attr = bytes(attribute)
        cond = bytes(condition)
        if kind == FilterType.EXTENSIBLE_MATCH:
            packet = new_constructed(ClassType.CONTEXT, kind, kind.description)
            if rule:
                field = MatchingRuleAssertion.MATCHING_RULE
                packet.append_child(new_string(ClassType.CONTEXT, TagType.PRIMITIVE, field, bytes(rule), field.description))
            if attr:
                field = MatchingRuleAssertion.TYPE
                packet.append_child(new_string(ClassType.CONTEXT, TagType.PRIMITIVE, field, attr, field.description))
            value = decode_escaped_symbols(cond)
            field = MatchingRuleAssertion.MATCH_VALUE
            packet.append_child(new_string(ClassType.CONTEXT, TagType.PRIMITIVE, field, value, field.description))
            if dn_attributes:
                field = MatchingRuleAssertion.DN_ATTRIBUTES
                packet.append_child(new_boolean(ClassType.CONTEXT, TagType.PRIMITIVE, field, True, field.description))
        elif kind == FilterType.EQUALITY_MATCH and cond == _SYMBOL_ANY:
            packet = new_string(
                ClassType.CONTEXT, TagType.PRIMITIVE, FilterType.PRESENT, attr, FilterType.PRESENT.description
            )
        elif kind == FilterType.EQUALITY_MATCH and _SYMBOL_ANY in cond:
            packet = new_constructed(ClassType.CONTEXT, FilterType.SUBSTRINGS, FilterType.SUBSTRINGS.description)
            packet.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, attr, "Attribute"))
            seq = new_constructed(ClassType.UNIVERSAL, Tag.SEQUENCE, "Substrings")
            parts = cond.split(_SYMBOL_ANY)
            last = len(parts) - 1
            for index, part in enumerate(parts):
                if not part:
                    continue
                if index == 0:
                    tag = SubstringType.INITIAL
                elif index == last:
                    tag = SubstringType.FINAL
                else:
                    tag = SubstringType.ANY
                value = decode_escaped_symbols(part)
                seq.append_child(new_string(ClassType.CONTEXT, TagType.PRIMITIVE, tag, value, tag.description))
            packet.append_child(seq)
        else:
            value = decode_escaped_symbols(cond)
            packet = new_constructed(ClassType.CONTEXT, kind, kind.description)
            packet.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, attr, "Attribute"))
            packet.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, value, "Condition"))

        return packet, new_pos + width


def compile_filter(text: Union[str, bytes]) -> Packet:
    """Compile a string filter such as ``(&(cn=a*)(sn=b))`` into a BER packet."""
    buf = _to_bytes(text)
    if not buf or buf[0] != ord("("):
        raise _compile_error("ldap: filter does not start with an '('")
    try:
        packet, pos = _FilterCompiler(buf).compile(1)
    except (IndexError, TypeError, ValueError) as exc:
        if isinstance(exc, LDAPError):
            raise
        raise _compile_error("ldap: error compiling filter") from exc
    if pos > len(buf):
        raise _compile_error("ldap: unexpected end of filter")
    if pos < len(buf):
        rest = buf[pos:].decode("utf-8", "surrogateescape")
        raise _compile_error(f"ldap: finished compiling filter with extra at end: {rest}")
    return packet


def _dn_attributes_flag(child: Packet) -> bool:
    if isinstance(child.value, bool):
        return child.value
    return bool(child.data) and child.data[0] != 0


def _decompile(packet: Packet) -> bytes:
    out = bytearray(b"(")
    tag = packet.tag
    children = packet.children

    if tag == FilterType.AND:
        out += b"&" + b"".join(_decompile(child) for child in children)
    elif tag == FilterType.OR:
        out += b"|" + b"".join(_decompile(child) for child in children)
    elif tag == FilterType.NOT:
        out += b"!" + _decompile(children[0])
    elif tag == FilterType.SUBSTRINGS:
        out += children[0].data + b"="
        for index, child in enumerate(children[1].children):
            if index == 0 and child.tag != SubstringType.INITIAL:
                out += _SYMBOL_ANY
            out += _escape_filter(child.data)
            if child.tag != SubstringType.FINAL:
                out += _SYMBOL_ANY
    elif tag == FilterType.EQUALITY_MATCH:
        out += children[0].data + b"=" + _escape_filter(children[1].data)
    elif tag == FilterType.GREATER_OR_EQUAL:
        out += children[0].data + b">=" + _escape_filter(children[1].data)
    elif tag == FilterType.LESS_OR_EQUAL:
        out += children[0].data + b"<=" + _escape_filter(children[1].data)
    elif tag == FilterType.PRESENT:
        out += packet.data + b"=*"
    elif tag == FilterType.APPROX_MATCH:
        out += children[0].data + b"~=" + _escape_filter(children[1].data)
    elif tag == FilterType.EXTENSIBLE_MATCH:
        attr = b""
        rule = b""
        value = b""
        dn_attributes = False
        for child in children:
            if child.tag == MatchingRuleAssertion.MATCHING_RULE:
                rule = child.data
            elif child.tag == MatchingRuleAssertion.TYPE:
                attr = child.data
            elif child.tag == MatchingRuleAssertion.MATCH_VALUE:
                value = child.data
            elif child.tag == MatchingRuleAssertion.DN_ATTRIBUTES:
                dn_attributes = _dn_attributes_flag(child)
        out += attr
        if dn_attributes:
            out += b":dn"
        if rule:
            out += b":" + rule
        out += b":=" + _escape_filter(value)

    out += b")"
    return bytes(out)


def decompile_filter(packet: Packet) -> str:
    """Render a filter packet back into its string form."""
    try:
        raw = _decompile(packet)
    except (IndexError, AttributeError, TypeError) as exc:
        raise LDAPError(ResultCode.ERROR_FILTER_DECOMPILE, "ldap: error decompiling filter") from exc
    return raw.decode("utf-8", "surrogateescape")