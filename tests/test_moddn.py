from ldapwire.ber import ClassType, Tag, TagType, decode_packet, new_string
from ldapwire.moddn import ModifyDNRequest
from ldapwire.request import Application, build_envelope


def _encode(req):
    return decode_packet(build_envelope(3, req).to_bytes())


def test_rename_without_move():
    req = ModifyDNRequest("uid=user,ou=people,dc=example,dc=org", "uid=new", True, "")
    envelope = _encode(req)
    op = envelope.children[1]
    assert op.class_type == ClassType.APPLICATION
    assert op.tag == Application.MODIFY_DN_REQUEST
    assert [c.value for c in op.children[:2]] == ["uid=user,ou=people,dc=example,dc=org", "uid=new"]
    assert len(op.children) == 3
    assert op.children[2].tag == Tag.BOOLEAN
    assert op.children[2].data == b"\xff"
    assert op.children[2].value is True


def test_rename_and_move():
    req = ModifyDNRequest(
        "uid=user,ou=people,dc=example,dc=org", "uid=new", True, "ou=users,dc=example,dc=org"
    )
    op = _encode(req).children[1]
    assert len(op.children) == 4
    superior = op.children[3]
    assert superior.class_type == ClassType.CONTEXT
    assert superior.tag == 0
    assert superior.data == b"ou=users,dc=example,dc=org"


def test_move_only():
    req = ModifyDNRequest(
        "uid=user,ou=people,dc=example,dc=org", "uid=user", True, "ou=users,dc=example,dc=org"
    )
    op = _encode(req).children[1]
    assert op.children[1].value == "uid=user"
    assert op.children[3].data == b"ou=users,dc=example,dc=org"


def test_keep_old_rdn_encodes_false():
    op = _encode(ModifyDNRequest("cn=a", "cn=b", False)).children[1]
    assert op.children[2].value is False
    assert op.children[2].data == b"\x00"


def test_controls_are_appended():
    control = new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, "ctrl", "Control")
    envelope = _encode(ModifyDNRequest("cn=a", "cn=b", True, controls=[control]))
    assert len(envelope.children) == 3
    assert envelope.children[2].children[0].value == "ctrl"


def test_no_controls_no_extra_child():
    envelope = _encode(ModifyDNRequest("cn=a", "cn=b", True))
    assert len(envelope.children) == 2
    assert envelope.children[0].value == 3