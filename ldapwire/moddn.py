"""Modify DN requests: renaming and moving entries."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ber import ClassType, Packet, Tag, TagType, new_boolean, new_constructed, new_string
from .request import Application
from .search import _encode_controls


@dataclass
class ModifyDNRequest:
    """Rename ``dn`` to ``new_rdn``, optionally moving it under ``new_superior``.

    An empty ``new_superior`` only renames the entry; to move without
    renaming, pass the entry's current first RDN as ``new_rdn``.
    """

    dn: str = ""
    new_rdn: str = ""
    delete_old_rdn: bool = False
    new_superior: str = ""
    controls: list = field(default_factory=list)

    def append_to(self, envelope: Packet) -> None:
        """Append the encoded request, and any controls, to an LDAP message."""
        pkt = new_constructed(ClassType.APPLICATION, Application.MODIFY_DN_REQUEST, "Modify DN Request")
        pkt.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, self.dn, "DN"))
        pkt.append_child(
            new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, self.new_rdn, "New RDN")
        )
        if self.delete_old_rdn:
            pkt.append_child(
                new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.BOOLEAN, b"\xff", "Delete old RDN")
            )
        else:
            pkt.append_child(
                new_boolean(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.BOOLEAN, False, "Delete old RDN")
            )
        if self.new_superior:
            pkt.append_child(
                new_string(ClassType.CONTEXT, TagType.PRIMITIVE, 0, self.new_superior, "New Superior")
            )

        envelope.append_child(pkt)
        if self.controls:
            envelope.append_child(_encode_controls(self.controls))