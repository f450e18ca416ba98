"""The "Who Am I?" extended operation (RFC 4532)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .ber import ClassType, Packet, TagType, new_constructed, new_string
from .errors import LDAPError, ResultCode, get_ldap_error
from .request import Application
from .search import _encode_controls

WHOAMI_OID = "1.3.6.1.4.1.4203.1.11.3"

_RESPONSE_VALUE_TAG = 11


@dataclass
class WhoAmIRequest:
    """Asks the server which authorization identity the session has."""

    controls: list = field(default_factory=list)

    def append_to(self, envelope: Packet) -> None:
        """Append the extended request, and any controls, to an LDAP message."""
        request = new_constructed(
            ClassType.APPLICATION, Application.EXTENDED_REQUEST, "Who Am I? Extended Operation"
        )
        request.append_child(
            new_string(ClassType.CONTEXT, TagType.PRIMITIVE, 0, WHOAMI_OID, "Extended Request Name: Who Am I? OID")
        )
        envelope.append_child(request)
        if self.controls:
            envelope.append_child(_encode_controls(self.controls))


@dataclass
class WhoAmIResult:
    """The authorization identity reported by the server."""

    authz_id: str = ""


def parse_whoami_response(packet: Optional[Packet]) -> WhoAmIResult:
    """Read the authzId from an extended response, raising LDAPError on failure."""
    if packet is None:
        raise LDAPError(ResultCode.ERROR_NETWORK, "ldap: could not retrieve message")
    if len(packet.children) < 2:
        raise get_ldap_error(packet)
    response = packet.children[1]
    if response.tag != Application.EXTENDED_RESPONSE:
        raise LDAPError(ResultCode.ERROR_UNEXPECTED_RESPONSE, f"Unexpected Response: {response.tag}")
    error = get_ldap_error(packet)
    if error is not None:
        raise error

    result = WhoAmIResult()
    for child in response.children:
        if child.tag == _RESPONSE_VALUE_TAG:
            result.authz_id = child.data.decode("utf-8", "surrogateescape")
    return result