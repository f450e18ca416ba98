"""LDAP message envelopes and referral extraction."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Protocol, Union

from .ber import ClassType, Packet, Tag, TagType, new_integer, new_sequence
from .errors import LDAPError, ResultCode, is_error_with_code


class Application(IntEnum):
    """LDAP protocol operation tags (APPLICATION class)."""

    BIND_REQUEST = 0
    BIND_RESPONSE = 1
    UNBIND_REQUEST = 2
    SEARCH_REQUEST = 3
    SEARCH_RESULT_ENTRY = 4
    SEARCH_RESULT_DONE = 5
    MODIFY_REQUEST = 6
    MODIFY_RESPONSE = 7
    ADD_REQUEST = 8
    ADD_RESPONSE = 9
    DEL_REQUEST = 10
    DEL_RESPONSE = 11
    MODIFY_DN_REQUEST = 12
    MODIFY_DN_RESPONSE = 13
    COMPARE_REQUEST = 14
    COMPARE_RESPONSE = 15
    ABANDON_REQUEST = 16
    SEARCH_RESULT_REFERENCE = 19
    EXTENDED_REQUEST = 23
    EXTENDED_RESPONSE = 24
    INTERMEDIATE_RESPONSE = 25

    @property
    def description(self) -> str:
        return " ".join(word.capitalize() for word in self.name.split("_")).replace("Dn ", "DN ")


class ReferralError(Exception):
    """A referral result whose referral URL could not be extracted."""


class _AppendsTo(Protocol):
    def append_to(self, envelope: Packet) -> None: ...


RequestLike = Union[_AppendsTo, Callable[[Packet], None]]


def build_envelope(message_id: int, request: RequestLike) -> Packet:
    """Wrap a request in an LDAPMessage sequence with the given message ID."""
    packet = new_sequence("LDAP Request")
    packet.append_child(new_integer(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.INTEGER, message_id, "MessageID"))
    append = getattr(request, "append_to", None)
    if append is None:
        if not callable(request):
            raise TypeError(f"cannot build a request from {request!r}")
        append = request
    append(packet)
    return packet


def get_referral(err: BaseException, packet: Packet) -> str:
    """Return the referral URL carried by a referral error, or "" if ``err`` is not one."""
    if not is_error_with_code(err, ResultCode.REFERRAL):
        return ""
    prefix = "ldap: returned error indicates the packet contains a referral but"

    if len(packet.children) < 2:
        raise ReferralError(f"{prefix} it doesn't have sufficient child nodes: {err}") from err

    response = packet.children[1]
    if response.tag != Tag.OBJECT_DESCRIPTOR:
        raise ReferralError(
            f"{prefix} the relevant child node isn't an object descriptor: {err}"
        ) from err

    for child in response.children:
        if child.tag == Tag.BIT_STRING and child.children:
            referral = child.children[0].value
            if isinstance(referral, str):
                return referral

    raise ReferralError(f"{prefix} the referral couldn't be decoded: {err}") from err


__all__ = ["Application", "LDAPError", "ReferralError", "build_envelope", "get_referral"]