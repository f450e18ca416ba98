import pytest

from ldapwire.ber import ClassType, Tag, TagType, decode_packet, new_string
from ldapwire.modify import Change, ChangeOperation, ModifyRequest, PartialAttribute
from ldapwire.request import Application, build_envelope


class _Control:
    def encode(self):
        return new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, "ctrl", "Control")


@pytest.mark.parametrize(
    "method, expected",
    [
        ("add", ChangeOperation.ADD),
        ("delete", ChangeOperation.DELETE),
        ("replace", ChangeOperation.REPLACE),
    ],
)
def test_change_methods_record_operation(method, expected):
    req = ModifyRequest("cn=a,dc=example,dc=com")
    getattr(req, method)("mail", ["a@example.com", "b@example.com"])
    assert req.changes == [Change(expected, PartialAttribute("mail", ["a@example.com", "b@example.com"]))]


def test_increment_wraps_single_value():
    req = ModifyRequest("cn=a,dc=example,dc=com")
    req.increment("uidNumber", "1")
    assert req.changes[0].operation == ChangeOperation.INCREMENT
    assert req.changes[0].modification.vals == ["1"]


def test_changes_keep_order():
    req = ModifyRequest("cn=a")
    req.add("a", ["1"])
    req.replace("b", ["2"])
    req.delete("c", [])
    assert [c.operation for c in req.changes] == [
        ChangeOperation.ADD,
        ChangeOperation.REPLACE,
        ChangeOperation.DELETE,
    ]


def test_partial_attribute_encoding_round_trip():
    packet = decode_packet(PartialAttribute("cn", ["x", "y"]).encode().to_bytes())
    assert packet.tag == Tag.SEQUENCE
    assert packet.children[0].value == "cn"
    assert packet.children[1].tag == Tag.SET
    assert [child.value for child in packet.children[1].children] == ["x", "y"]


def test_change_encoding_has_enumerated_operation():
    packet = decode_packet(Change(ChangeOperation.REPLACE, PartialAttribute("sn", ["z"])).encode().to_bytes())
    assert packet.children[0].tag == Tag.ENUMERATED
    assert packet.children[0].value == ChangeOperation.REPLACE
    assert packet.children[1].children[0].value == "sn"


def test_modify_request_envelope():
    req = ModifyRequest("cn=a,dc=example,dc=com")
    req.add("mail", ["a@example.com"])
    req.delete("description", [])
    envelope = decode_packet(build_envelope(7, req).to_bytes())
    assert envelope.children[0].value == 7
    op = envelope.children[1]
    assert op.class_type == ClassType.APPLICATION
    assert op.tag == Application.MODIFY_REQUEST
    assert op.children[0].value == "cn=a,dc=example,dc=com"
    changes = op.children[1].children
    assert [c.children[0].value for c in changes] == [ChangeOperation.ADD, ChangeOperation.DELETE]
    assert changes[1].children[1].children[1].children == []
    assert len(envelope.children) == 2


def test_modify_request_with_controls():
    req = ModifyRequest("cn=a", controls=[_Control()])
    envelope = decode_packet(build_envelope(1, req).to_bytes())
    assert len(envelope.children) == 3
    controls = envelope.children[2]
    assert controls.class_type == ClassType.CONTEXT
    assert controls.tag == 0
    assert controls.children[0].value == "ctrl"