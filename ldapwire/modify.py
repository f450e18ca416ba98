"""Modify requests (RFC 4511 section 4.6, increment from RFC 4525)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

from .ber import ClassType, Packet, Tag, TagType, new_constructed, new_integer, new_string
from .request import Application
from .search import _encode_controls


class ChangeOperation(IntEnum):
    """The kind of change applied to one attribute."""

    ADD = 0
    DELETE = 1
    REPLACE = 2
    INCREMENT = 3


@dataclass
class PartialAttribute:
    """An attribute type with the values a change applies to."""

    type: str = ""
    vals: list = field(default_factory=list)

    def encode(self) -> Packet:
        """Encode as a PartialAttribute SEQUENCE."""
        seq = new_constructed(ClassType.UNIVERSAL, Tag.SEQUENCE, "PartialAttribute")
        seq.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, self.type, "Type"))
        values = new_constructed(ClassType.UNIVERSAL, Tag.SET, "AttributeValue")
        for value in self.vals:
            values.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, value, "Vals"))
        seq.append_child(values)
        return seq


@dataclass
class Change:
    """One change of a modify request."""

    operation: int = ChangeOperation.ADD
    modification: PartialAttribute = field(default_factory=PartialAttribute)

    def encode(self) -> Packet:
        """Encode as a change SEQUENCE of operation and modification."""
        change = new_constructed(ClassType.UNIVERSAL, Tag.SEQUENCE, "Change")
        change.append_child(
            new_integer(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.ENUMERATED, int(self.operation), "Operation")
        )
        change.append_child(self.modification.encode())
        return change


@dataclass
class ModifyRequest:
    """A request to change the attributes of the entry named by ``dn``."""

    dn: str = ""
    changes: list = field(default_factory=list)
    controls: list = field(default_factory=list)

    def _append_change(self, operation: ChangeOperation, attr_type: str, attr_vals: Iterable[str]) -> None:
        self.changes.append(Change(operation, PartialAttribute(attr_type, list(attr_vals))))

    def add(self, attr_type: str, attr_vals: Iterable[str]) -> None:
        """Queue adding values to an attribute."""
        self._append_change(ChangeOperation.ADD, attr_type, attr_vals)

    def delete(self, attr_type: str, attr_vals: Iterable[str]) -> None:
        """Queue deleting values (or the whole attribute when empty)."""
        self._append_change(ChangeOperation.DELETE, attr_type, attr_vals)

    def replace(self, attr_type: str, attr_vals: Iterable[str]) -> None:
        """Queue replacing all values of an attribute."""
        self._append_change(ChangeOperation.REPLACE, attr_type, attr_vals)

    def increment(self, attr_type: str, attr_val: str) -> None:
        """Queue incrementing a numeric attribute by ``attr_val``."""
        self._append_change(ChangeOperation.INCREMENT, attr_type, [attr_val])

    def append_to(self, envelope: Packet) -> None:
        """Append the encoded request, and any controls, to an LDAP message."""
        pkt = new_constructed(ClassType.APPLICATION, Application.MODIFY_REQUEST, "Modify Request")
        pkt.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, self.dn, "DN"))
        changes = new_constructed(ClassType.UNIVERSAL, Tag.SEQUENCE, "Changes")
        for change in self.changes:
            changes.append_child(change.encode())
        pkt.append_child(changes)

        envelope.append_child(pkt)
        if self.controls:
            envelope.append_child(_encode_controls(self.controls))


@dataclass
class ModifyResult:
    """The server's response to a modify request."""

    controls: list = field(default_factory=list)
    referral: str = ""