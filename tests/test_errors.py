import pytest

from ldapwire.ber import ClassType, Packet, Tag, TagType, new_constructed, new_integer, new_sequence, new_string
from ldapwire.errors import (
    LDAPError,
    ResultCode,
    describe_result_code,
    get_ldap_error,
    is_error_any_of,
    is_error_with_code,
)

BIND_RESPONSE_TAG = 1


def _result_packet(code, matched, diagnostic):
    response = new_constructed(ClassType.APPLICATION, BIND_RESPONSE_TAG, "Bind Response")
    response.append_child(new_integer(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.INTEGER, code, "resultCode"))
    response.append_child(new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, matched, "matchedDN"))
    response.append_child(
        new_string(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.OCTET_STRING, diagnostic, "diagnosticMessage")
    )
    packet = new_sequence("LDAPMessage")
    packet.append_child(new_integer(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.INTEGER, 0, "messageID"))
    packet.append_child(response)
    return packet


def test_nil_packet():
    err = get_ldap_error(None)
    assert is_error_with_code(err, ResultCode.ERROR_UNEXPECTED_RESPONSE)


def test_nil_result_in_packet():
    pack = Packet(children=[Packet(), None])
    err = get_ldap_error(pack)
    assert is_error_with_code(err, ResultCode.ERROR_UNEXPECTED_RESPONSE)
    assert err.packet is pack


def test_get_ldap_error():
    diagnostic = "Detailed error message"
    packet = _result_packet(ResultCode.INVALID_CREDENTIALS, "dc=example,dc=org", diagnostic)
    err = get_ldap_error(packet)
    assert isinstance(err, LDAPError)
    assert err.result_code == ResultCode.INVALID_CREDENTIALS
    assert err.message == diagnostic
    assert err.matched_dn == "dc=example,dc=org"


def test_get_ldap_error_success():
    packet = _result_packet(0, "", "")
    assert get_ldap_error(packet) is None


def test_invalid_packet_format_is_network_error():
    packet = new_sequence("LDAPMessage")
    packet.append_child(new_integer(ClassType.UNIVERSAL, TagType.PRIMITIVE, Tag.INTEGER, 1, "messageID"))
    err = get_ldap_error(packet)
    assert err.result_code == ResultCode.ERROR_NETWORK
    assert err.message == "Invalid packet format"


def test_error_string_format():
    err = LDAPError(ResultCode.ERROR_FILTER_COMPILE, "ldap: missing characters for escape in filter")
    assert str(err) == (
        'LDAP Result Code 201 "Filter Compile Error": ldap: missing characters for escape in filter'
    )


def test_error_can_be_raised_and_caught():
    with pytest.raises(LDAPError) as info:
        raise LDAPError(ResultCode.BUSY, ValueError("inner"))
    assert info.value.result_code == ResultCode.BUSY
    assert is_error_with_code(info.value, ResultCode.BUSY)
    assert str(info.value) == 'LDAP Result Code 51 "Busy": inner'
    assert isinstance(info.value.__cause__, ValueError)


def test_describe_result_code():
    assert describe_result_code(ResultCode.INVALID_CREDENTIALS) == "Invalid Credentials"
    assert describe_result_code(ResultCode.ERROR_NETWORK) == "Network Error"
    assert describe_result_code(9) == ""


def test_is_error_any_of():
    err = LDAPError(ResultCode.NO_SUCH_OBJECT, "gone")
    assert is_error_any_of(err, ResultCode.BUSY, ResultCode.NO_SUCH_OBJECT)
    assert not is_error_any_of(err, ResultCode.BUSY)
    assert not is_error_any_of(err)
    assert not is_error_any_of(None, ResultCode.NO_SUCH_OBJECT)
    assert not is_error_any_of(ValueError("x"), ResultCode.NO_SUCH_OBJECT)


def test_unknown_code_kept_as_int():
    err = LDAPError(9, "odd")
    assert err.result_code == 9
    assert str(err) == 'LDAP Result Code 9 "": odd'