"""Search requests, result entries and mapping entries onto dataclasses."""

from __future__ import annotations

import dataclasses
import re
import typing
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Mapping, Optional

from .ber import ClassType, Packet, Tag, TagType, new_boolean, new_constructed, new_integer, new_string
from .filter import compile_filter
from .request import Application

DECODER_TAG_NAME = "ldap"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_STRING_HINTS = {
    "str": str,
    "builtins.str": str,
    "int": int,
    "builtins.int": int,
    "bytes": bytes,
    "builtins.bytes": bytes,
    "list": list,
    "List": list,
    "typing.List": list,
    "list[str]": list[str],
    "List[str]": list[str],
    "typing.List[str]": list[str],
}


class Scope(IntEnum):
    """How deep below the base DN a search reaches."""

    BASE_OBJECT = 0
    SINGLE_LEVEL = 1
    WHOLE_SUBTREE = 2

    @property
    def description(self) -> str:
        return self.name.replace("_", " ").title()


class DerefAliases(IntEnum):
    """When aliases are dereferenced during a search."""

    NEVER_DEREF_ALIASES = 0
    DEREF_IN_SEARCHING = 1
    DEREF_FINDING_BASE_OBJ = 2
    DEREF_ALWAYS = 3

    @property
    def description(self) -> str:
        return "".join(word.capitalize() for word in self.name.split("_"))


class UnmarshalError(ValueError):
    """Raised when an entry cannot be mapped onto the given target."""


@dataclass
class EntryAttribute:
    """One attribute of an entry with its string and raw values."""

    name: str = ""
    values: list = field(default_factory=list)
    byte_values: list = field(default_factory=list)

    def _line(self) -> str:
        return f"{self.name}: [{' '.join(self.values)}]"

    def print(self) -> None:
        """Write a one-line description to standard output."""
        print(self._line())

    def pretty_print(self, indent: int) -> None:
        """Write a one-line description indented by ``indent`` spaces."""
        print(" " * indent + self._line())


def new_entry_attribute(name: str, values: Iterable[str]) -> EntryAttribute:
    """Build an attribute whose raw values are the UTF-8 encodings of ``values``."""
    values = list(values)
    return EntryAttribute(name, values, [value.encode("utf-8", "surrogateescape") for value in values])


def _equal_fold(left: str, right: str) -> bool:
    if left == right:
        return True
    if len(left) != len(right):
        return False
    return all(a == b or a.lower() == b.lower() or a.upper() == b.upper() for a, b in zip(left, right))


def _read_tag(f: dataclasses.Field) -> str:
    tag = f.metadata.get(DECODER_TAG_NAME)
    if tag is None:
        return f.name
    return str(tag).split(",")[0]


def _resolve_hint(hint: Any) -> Any:
    if isinstance(hint, str):
        key = hint.replace(" ", "").strip("'\"")
        return _STRING_HINTS.get(key, hint)
    return hint


def _field_types(cls: type) -> dict:
    return {f.name: _resolve_hint(f.type) for f in dataclasses.fields(cls)}


def _is_str_list(hint: Any) -> bool:
    if hint is list:
        return True
    if typing.get_origin(hint) is list:
        args = typing.get_args(hint)
        return not args or args == (str,)
    return False


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise UnmarshalError(f"ldap: could not parse value '{text}' into int field")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise UnmarshalError(f"ldap: could not parse value '{text}' into int field")
    return number


@dataclass
class Entry:
    """A single search result entry."""

    dn: str = ""
    attributes: list = field(default_factory=list)

    def _find(self, attribute: str, fold: bool) -> Optional[EntryAttribute]:
        for attr in self.attributes:
            if (_equal_fold(attribute, attr.name) if fold else attr.name == attribute):
                return attr
        return None

    def get_attribute_values(self, attribute: str) -> list:
        """Values of the named attribute, or an empty list."""
        attr = self._find(attribute, False)
        return attr.values if attr is not None else []

    def get_equal_fold_attribute_values(self, attribute: str) -> list:
        """Values of the attribute matched case-insensitively, or an empty list."""
        attr = self._find(attribute, True)
        return attr.values if attr is not None else []

    def get_raw_attribute_values(self, attribute: str) -> list:
        """Raw byte values of the named attribute, or an empty list."""
        attr = self._find(attribute, False)
        return attr.byte_values if attr is not None else []

    def get_equal_fold_raw_attribute_values(self, attribute: str) -> list:
        """Raw byte values of the attribute matched case-insensitively, or an empty list."""
        attr = self._find(attribute, True)
        return attr.byte_values if attr is not None else []

    def get_attribute_value(self, attribute: str) -> str:
        """First value of the named attribute, or ""."""
        values = self.get_attribute_values(attribute)
        return values[0] if values else ""

    def get_equal_fold_attribute_value(self, attribute: str) -> str:
        """First value of the attribute matched case-insensitively, or ""."""
        values = self.get_equal_fold_attribute_values(attribute)
        return values[0] if values else ""

    def get_raw_attribute_value(self, attribute: str) -> bytes:
        """First raw value of the named attribute, or b""."""
        values = self.get_raw_attribute_values(attribute)
        return values[0] if values else b""

    def get_equal_fold_raw_attribute_value(self, attribute: str) -> bytes:
        """First raw value of the attribute matched case-insensitively, or b""."""
        values = self.get_equal_fold_raw_attribute_values(attribute)
        return values[0] if values else b""

    def print(self) -> None:
        """Write the DN and attributes to standard output."""
        print(f"DN: {self.dn}")
        for attr in self.attributes:
            attr.print()

    def pretty_print(self, indent: int) -> None:
        """Write the DN and attributes with indentation."""
        print(f"{' ' * indent}DN: {self.dn}")
        for attr in self.attributes:
            attr.pretty_print(indent + 2)

    def unmarshal(self, target: Any) -> None:
        """Fill the fields of a dataclass instance from this entry.

        The attribute name is taken from the field's ``ldap`` metadata or the
        field name; ``dn`` receives the entry's DN. Supported field types are
        str, list[str], int and bytes; single-valued fields take the first value.
        """
        if isinstance(target, type) or not dataclasses.is_dataclass(target):
            raise UnmarshalError(
                f"ldap: expected a dataclass instance, got {type(target).__name__}"
            )
        hints = _field_types(type(target))
        for f in dataclasses.fields(target):
            if f.name.startswith("_"):
                continue
            tag = _read_tag(f)
            if tag == "dn":
                setattr(target, f.name, self.dn)
                continue
            values = self.get_attribute_values(tag)
            if not values:
                continue
            hint = hints.get(f.name, f.type)
            if _is_str_list(hint):
                current = getattr(target, f.name, None) or []
                setattr(target, f.name, list(current) + list(values))
            elif hint is str or hint == "str":
                setattr(target, f.name, values[0])
            elif hint is bytes or hint == "bytes":
                setattr(target, f.name, values[0].encode("utf-8", "surrogateescape"))
            elif hint is int or hint == "int":
                setattr(target, f.name, _parse_int(values[0]))
            else:
                raise UnmarshalError(
                    "ldap: expected field to be of type str, list[str], int or bytes, "
                    f"got {hint!r}"
                )


def new_entry(dn: str, attributes: Mapping[str, Iterable[str]]) -> Entry:
    """Build an entry whose attributes are ordered by name."""
    return Entry(dn, [new_entry_attribute(name, attributes[name]) for name in sorted(attributes)])


def _packet_text(packet: Packet) -> str:
    if isinstance(packet.value, str):
        return packet.value
    return packet.data.decode("utf-8", "surrogateescape")


def unpack_attributes(children: Iterable[Packet]) -> list:
    """Turn PartialAttribute packets into EntryAttribute objects."""
    attributes = []
    for child in children:
        value_packets = child.children[1].children
        attributes.append(
            EntryAttribute(
                name=_packet_text(child.children[0]),
                values=[_packet_text(value) for value in value_packets],
                byte_values=[bytes(value.data) for value in value_packets],
            )
        )
    return attributes


def _encode_controls(controls: Iterable[Any]) -> Packet:
    packet = new_constructed(ClassType.CONTEXT, 0, "Controls")
    for control in controls:
        packet.append_child(control if isinstance(control, Packet) else control.encode())
    return packet


@dataclass
class SearchRequest:
    """A search request to send to the server."""

    base_dn: str = ""
    scope: int = Scope.BASE_OBJECT
    deref_aliases: int = DerefAliases.NEVER_DEREF_ALIASES
    size_limit: int = 0
    time_limit: int = 0
    types_only: bool = False
    filter: str = ""
    attributes: list = field(default_factory=list)
    controls: list = field(default_factory=list)

    def append_to(self, envelope: Packet) -> None:
        """Append the encoded request, and any controls, to an LDAP message."""
        pkt = new_constructed(ClassType.APPLICATION, Application.SEARCH_REQUEST, "Search Request")
        universal, primitive = ClassType.UNIVERSAL, TagType.PRIMITIVE
        pkt.append_child(new_string(universal, primitive, Tag.OCTET_STRING, self.base_dn, "Base DN"))
        pkt.append_child(new_integer(universal, primitive, Tag.ENUMERATED, int(self.scope), "Scope"))
        pkt.append_child(new_integer(universal, primitive, Tag.ENUMERATED, int(self.deref_aliases), "Deref Aliases"))
        pkt.append_child(new_integer(universal, primitive, Tag.INTEGER, int(self.size_limit), "Size Limit"))
        pkt.append_child(new_integer(universal, primitive, Tag.INTEGER, int(self.time_limit), "Time Limit"))
        pkt.append_child(new_boolean(universal, primitive, Tag.BOOLEAN, self.types_only, "Types Only"))
        pkt.append_child(compile_filter(self.filter))
        attributes = new_constructed(universal, Tag.SEQUENCE, "Attributes")
        for attribute in self.attributes or ():
            attributes.append_child(new_string(universal, primitive, Tag.OCTET_STRING, attribute, "Attribute"))
        pkt.append_child(attributes)

        envelope.append_child(pkt)
        if self.controls:
            envelope.append_child(_encode_controls(self.controls))


@dataclass
class SearchResult:
    """The server's response to a search request."""

    entries: list = field(default_factory=list)
    referrals: list = field(default_factory=list)
    controls: list = field(default_factory=list)

    def print(self) -> None:
        """Write every entry to standard output."""
        for entry in self.entries:
            entry.print()

    def pretty_print(self, indent: int) -> None:
        """Write every entry with indentation."""
        for entry in self.entries:
            entry.pretty_print(indent)