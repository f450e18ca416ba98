"""The unbind request, which ends an LDAP session."""

from __future__ import annotations

from dataclasses import dataclass

from .ber import ClassType, Packet, TagType
from .request import Application


@dataclass(frozen=True)
class UnbindRequest:
    """The "quit" operation; the connection is unusable after it is sent."""

    def append_to(self, envelope: Packet) -> None:
        """Append the empty unbind operation to an LDAP message."""
        envelope.append_child(
            Packet(
                class_type=ClassType.APPLICATION,
                tag_type=TagType.PRIMITIVE,
                tag=Application.UNBIND_REQUEST,
                description=Application.UNBIND_REQUEST.description,
            )
        )