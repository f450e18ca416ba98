import pytest

from ldapwire.dn import DN, AttributeTypeAndValue, DNParseError, RelativeDN, parse_dn


def _dn(*rdns):
    return DN([RelativeDN([AttributeTypeAndValue(t, v) for t, v in rdn]) for rdn in rdns])


SUCCESS_CASES = [
    ("", DN([])),
    (
        "cn=Jim\\2C \\22Hasse Hö\\22 Hansson!,dc=dummy,dc=com",
        _dn([("cn", 'Jim, "Hasse Hö" Hansson!')], [("dc", "dummy")], [("dc", "com")]),
    ),
    ("UID=jsmith,DC=example,DC=net", _dn([("UID", "jsmith")], [("DC", "example")], [("DC", "net")])),
    (
        "OU=Sales+CN=J. Smith,DC=example,DC=net",
        _dn([("OU", "Sales"), ("CN", "J. Smith")], [("DC", "example")], [("DC", "net")]),
    ),
    ("1.3.6.1.4.1.1466.0=#04024869", _dn([("1.3.6.1.4.1.1466.0", "Hi")])),
    ("1.3.6.1.4.1.1466.0=#04024869,DC=net", _dn([("1.3.6.1.4.1.1466.0", "Hi")], [("DC", "net")])),
    ("CN=Lu\\C4\\8Di\\C4\\87", _dn([("CN", "Lučić")])),
    ("  CN  =  Lu\\C4\\8Di\\C4\\87  ", _dn([("CN", "Lučić")])),
    ("   A   =   1   ,   B   =   2   ", _dn([("A", "1")], [("B", "2")])),
    ("   A   =   1   +   B   =   2   ", _dn([("A", "1"), ("B", "2")])),
    (
        r"   \ \ A\ \    =   \ \ 1\ \    ,   \ \ B\ \    =   \ \ 2\ \    ",
        _dn([("  A  ", "  1  ")], [("  B  ", "  2  ")]),
    ),
    (
        r"   \ \ A\ \    =   \ \ 1\ \    +   \ \ B\ \    =   \ \ 2\ \    ",
        _dn([("  A  ", "  1  "), ("  B  ", "  2  ")]),
    ),
    ("cn=john.doe;dc=example,dc=net", _dn([("cn", "john.doe")], [("dc", "example")], [("dc", "net")])),
    (
        r"cn=john.doe\;weird name,dc=example,dc=net",
        _dn([("cn", "john.doe;weird name")], [("dc", "example")], [("dc", "net")]),
    ),
]


@pytest.mark.parametrize("text, expected", SUCCESS_CASES)
def test_successful_parsing(text, expected):
    assert parse_dn(text) == expected


ERROR_CASES = [
    ("*", "DN ended with incomplete type, value pair"),
    ("cn=Jim\\0Test", "failed to decode escaped character: encoding/hex: invalid byte: U+0054 'T'"),
    ("cn=Jim\\0", "got corrupted escaped character"),
    ("DC=example,=net", "DN ended with incomplete type, value pair"),
    ("1=#0402486", "failed to decode BER encoding: encoding/hex: odd length hex string"),
    ("test,DC=example,DC=com", "incomplete type, value pair"),
    ("=test,DC=example,DC=com", "incomplete type, value pair"),
]


@pytest.mark.parametrize("text, message", ERROR_CASES)
def test_error_parsing(text, message):
    with pytest.raises(DNParseError) as excinfo:
        parse_dn(text)
    assert str(excinfo.value) == message


EQUAL_CASES = [
    ("", "", True),
    ("o=A", "o=A", True),
    ("o=A", "o=B", False),
    ("o=A,o=B", "o=A,o=B", True),
    ("o=A,o=B", "o=A,o=C", False),
    ("o=A+o=B", "o=A+o=B", True),
    ("o=A+o=B", "o=A+o=C", False),
    ("o=A", "O=A", True),
    ("o=A,o=B", "o=A,O=B", True),
    ("o=A+o=B", "o=A+O=B", True),
    ("o=a", "O=A", False),
    ("o=a,o=B", "o=A,O=B", False),
    ("o=a+o=B", "o=A+O=B", False),
    ("o=A+o=B", "O=B+o=A", True),
    ("o=A+o=B", "O=B+o=A+O=B", False),
    ("o=A+o=B", "O=B+o=A+O=C", False),
    ("o=A+o=B+o=C", "O=B+o=A", False),
    ("cn=John Doe, ou=People, dc=sun.com", "cn=John Doe, ou=People, dc=sun.com", True),
    ("cn=\\ John\\20Doe, ou=People, dc=sun.com", "cn= \\ John Doe,ou=People,dc=sun.com", True),
    ("cn=John Doe, ou=People, dc=sun.com", "cn=John  Doe, ou=People, dc=sun.com", False),
    ("cn=john;dc=example,dc=com", "cn=john,dc=example,dc=com", True),
]


@pytest.mark.parametrize("left, right, expected", EQUAL_CASES)
def test_dn_equal(left, right, expected):
    a = parse_dn(left)
    b = parse_dn(right)
    assert a.equal(b) is expected
    assert b.equal(a) is expected
    assert (str(a) == str(b)) is a.equal(b)


EQUAL_FOLD_CASES = [
    ("o=A", "o=a", True),
    ("o=A,o=b", "o=a,o=B", True),
    ("o=a+o=B", "o=A+o=b", True),
    ("cn=users,ou=example,dc=com", "cn=Users,ou=example,dc=com", True),
    ("o=A", "O=a", True),
    ("o=A,o=b", "o=a,O=B", True),
    ("o=a+o=B", "o=A+O=b", True),
]


@pytest.mark.parametrize("left, right, expected", EQUAL_FOLD_CASES)
def test_dn_equal_fold(left, right, expected):
    a = parse_dn(left)
    b = parse_dn(right)
    assert a.equal_fold(b) is expected
    assert b.equal_fold(a) is expected


def test_equal_fold_still_detects_different_values():
    assert parse_dn("o=A,o=b").equal_fold(parse_dn("o=A,o=c")) is False


ANCESTOR_CASES = [
    ("", "", False),
    ("o=A", "o=A", False),
    ("o=A,o=B", "o=A,o=B", False),
    ("o=A+o=B", "o=A+o=B", False),
    ("ou=C,ou=B,o=A", "ou=E,ou=D,ou=B,o=A", False),
    ("ou=C,ou=B,o=A", "ou=E,ou=C,ou=B,o=A", True),
]


@pytest.mark.parametrize("left, right, expected", ANCESTOR_CASES)
def test_dn_ancestor(left, right, expected):
    assert parse_dn(left).ancestor_of(parse_dn(right)) is expected


def test_ancestor_of_fold_ignores_case():
    parent = parse_dn("ou=widgets,o=acme.com")
    child = parse_dn("ou=sprockets,OU=Widgets,o=ACME.com")
    assert parent.ancestor_of(child) is False
    assert parent.ancestor_of_fold(child) is True
    assert parent.ancestor_of_fold(parse_dn("ou=sprockets,ou=widgets,o=foo.com")) is False
    assert parent.ancestor_of_fold(parse_dn("OU=WIDGETS,o=acme.com")) is False


def test_string_form_sorts_rdn_attributes_and_lowercases_types():
    dn = parse_dn("OU=Sales+CN=J. Smith,DC=example,DC=net")
    assert str(dn) == "cn=J. Smith+ou=Sales,dc=example,dc=net"


def test_string_form_escapes_special_values():
    assert str(AttributeTypeAndValue("CN", " a#b,")) == "cn=\\ a\\#b\\,"
    assert str(AttributeTypeAndValue("cn", "x ")) == "cn=x\\ "
    assert str(AttributeTypeAndValue("cn", "é")) == "cn=\\c3\\a9"
    assert str(AttributeTypeAndValue("cn", 'a"b<c>d;e+f\\')) == 'cn=a\\"b\\<c\\>d\\;e\\+f\\\\'


def test_string_form_round_trips_through_parser():
    original = parse_dn('cn=Jim\\2C \\22Hasse Hö\\22 Hansson!,dc=dummy,dc=com')
    assert parse_dn(str(original)).equal(original)


def test_attribute_equality_rules():
    left = AttributeTypeAndValue("CN", "Value")
    assert left.equal(AttributeTypeAndValue("cn", "Value")) is True
    assert left.equal(AttributeTypeAndValue("cn", "value")) is False
    assert left.equal_fold(AttributeTypeAndValue("cn", "value")) is True


def test_relative_dn_equality_ignores_order():
    first = RelativeDN([AttributeTypeAndValue("a", "1"), AttributeTypeAndValue("b", "2")])
    second = RelativeDN([AttributeTypeAndValue("B", "2"), AttributeTypeAndValue("A", "1")])
    assert first.equal(second) is True
    assert first.equal(RelativeDN([AttributeTypeAndValue("a", "1")])) is False


def test_trailing_separator_is_dropped():
    assert parse_dn("cn=a,") == _dn([("cn", "a")])