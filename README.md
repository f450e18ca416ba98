# ldapwire

Building blocks for speaking LDAP v3. The package includes a small BER
encoder and decoder, RFC 4514 distinguished-name parsing and comparison,
RFC 4515 search-filter compilation, and encoders for common LDAP requests.
It depends only on the standard library.

## Installation

```
pip install ldapwire
```

## Modules

| Module | Contents |
| --- | --- |
| `ldapwire.ber` | `Packet`, `decode_packet`, `new_string`, `new_integer`, `new_boolean`, `new_constructed`, `new_sequence`, `ClassType`, `TagType`, `Tag`, `BERError` |
| `ldapwire.errors` | `ResultCode`, `LDAPError`, `describe_result_code`, `get_ldap_error`, `is_error_any_of`, `is_error_with_code` |
| `ldapwire.request` | `Application`, `build_envelope`, `get_referral`, `ReferralError` |
| `ldapwire.dn` | `parse_dn`, `DN`, `RelativeDN`, `AttributeTypeAndValue`, `DNParseError` |
| `ldapwire.filter` | `compile_filter`, `decompile_filter`, `decode_escaped_symbols`, `FilterType`, `SubstringType`, `MatchingRuleAssertion` |
| `ldapwire.search` | `SearchRequest`, `SearchResult`, `Entry`, `EntryAttribute`, `new_entry`, `new_entry_attribute`, `unpack_attributes`, `Scope`, `DerefAliases`, `UnmarshalError` |
| `ldapwire.modify` | `ModifyRequest`, `Change`, `PartialAttribute`, `ChangeOperation`, `ModifyResult` |
| `ldapwire.moddn` | `ModifyDNRequest` |
| `ldapwire.unbind` | `UnbindRequest` |
| `ldapwire.whoami` | `WhoAmIRequest`, `WhoAmIResult`, `parse_whoami_response` |

## Distinguished names

```python
from ldapwire.dn import parse_dn

dn = parse_dn("OU=Sales+CN=J. Smith,DC=example,DC=net")
str(dn)                     # 'cn=J. Smith+ou=Sales,dc=example,dc=net'

parent = parse_dn("dc=example,dc=net")
parent.ancestor_of(dn)      # True
parse_dn("o=A").equal(parse_dn("O=A"))        # True: attribute type case is ignored
parse_dn("o=a").equal_fold(parse_dn("O=A"))   # True: value case is ignored too
```

A malformed DN raises `DNParseError`.

## Search filters

```python
from ldapwire.filter import compile_filter, decompile_filter, FilterType

packet = compile_filter("(&(objectClass=person)(cn=Mi*er))")
packet.tag == FilterType.AND          # True
decompile_filter(packet)              # '(&(objectClass=person)(cn=Mi*er))'
wire = packet.to_bytes()              # BER-encoded filter
```

If a filter cannot be compiled, `LDAPError` is raised with result code
`ResultCode.ERROR_FILTER_COMPILE`. If a packet cannot be decompiled, it is
raised with `ResultCode.ERROR_FILTER_DECOMPILE`.

## Building requests

Each request type has an `append_to(envelope)` method. `build_envelope`
wraps the request in an LDAPMessage sequence with the message ID you give it:

```python
from ldapwire.request import build_envelope
from ldapwire.search import SearchRequest, Scope
from ldapwire.modify import ModifyRequest
from ldapwire.moddn import ModifyDNRequest

search = SearchRequest(
    base_dn="dc=example,dc=com",
    scope=Scope.WHOLE_SUBTREE,
    filter="(uid=jdoe)",
    attributes=["cn", "mail"],
)
message = build_envelope(1, search).to_bytes()

change = ModifyRequest("uid=jdoe,dc=example,dc=com")
change.replace("mail", ["jdoe@example.com"])
change.add("description", ["staff"])
message = build_envelope(2, change).to_bytes()

rename = ModifyDNRequest("uid=jdoe,ou=people,dc=example,dc=com", "uid=jsmith", True, "")
message = build_envelope(3, rename).to_bytes()
```

`UnbindRequest` and `WhoAmIRequest` are used the same way.

The `controls` list of a request may hold ready-made `Packet`s or objects
that have an `encode()` method returning one. The controls are appended as
the context-tagged Controls element of the message.

## Reading responses

```python
from ldapwire.ber import decode_packet
from ldapwire.errors import get_ldap_error, is_error_with_code, ResultCode

packet = decode_packet(received_bytes)
err = get_ldap_error(packet)          # None on success, else an LDAPError
if err is not None and is_error_with_code(err, ResultCode.INVALID_CREDENTIALS):
    ...
```

If an error carries the `REFERRAL` code, `get_referral(err, packet)` extracts
the referral URL. It raises `ReferralError` when the URL cannot be found.

`parse_whoami_response` turns a decoded extended response into a
`WhoAmIResult`. It raises `LDAPError` when the response reports a failure or
is not an extended response.

`unpack_attributes` turns the attribute list of a search result entry into
`EntryAttribute` objects. `Entry.unmarshal` fills a dataclass instance from an
entry. Each field takes its attribute name from its `ldap` metadata, or from
the field name if there is none. A field named `dn` receives the entry's DN.
The supported field types are `str`, `list[str]`, `int` and `bytes`.

## What this package does not do

This package opens no connections. It sends and receives no bytes, and it
keeps no session state. It has no bind operations, no TLS handling, no
message-ID bookkeeping and no paged-search loop. It does not decode response
controls into objects. It builds packets and reads packets; moving the bytes
to and from a server is up to you.

## Running the tests

```
pip install -e ".[test]"
pytest
```