"""LDAP result codes and the error type raised for failed operations."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Union

from .ber import ClassType, Packet, TagType


class ResultCode(IntEnum):
    """LDAP result codes plus client-side error codes."""

    SUCCESS = 0
    OPERATIONS_ERROR = 1
    PROTOCOL_ERROR = 2
    TIME_LIMIT_EXCEEDED = 3
    SIZE_LIMIT_EXCEEDED = 4
    COMPARE_FALSE = 5
    COMPARE_TRUE = 6
    AUTH_METHOD_NOT_SUPPORTED = 7
    STRONG_AUTH_REQUIRED = 8
    REFERRAL = 10
    ADMIN_LIMIT_EXCEEDED = 11
    UNAVAILABLE_CRITICAL_EXTENSION = 12
    CONFIDENTIALITY_REQUIRED = 13
    SASL_BIND_IN_PROGRESS = 14
    NO_SUCH_ATTRIBUTE = 16
    UNDEFINED_ATTRIBUTE_TYPE = 17
    INAPPROPRIATE_MATCHING = 18
    CONSTRAINT_VIOLATION = 19
    ATTRIBUTE_OR_VALUE_EXISTS = 20
    INVALID_ATTRIBUTE_SYNTAX = 21
    NO_SUCH_OBJECT = 32
    ALIAS_PROBLEM = 33
    INVALID_DN_SYNTAX = 34
    IS_LEAF = 35
    ALIAS_DEREFERENCING_PROBLEM = 36
    INAPPROPRIATE_AUTHENTICATION = 48
    INVALID_CREDENTIALS = 49
    INSUFFICIENT_ACCESS_RIGHTS = 50
    BUSY = 51
    UNAVAILABLE = 52
    UNWILLING_TO_PERFORM = 53
    LOOP_DETECT = 54
    SORT_CONTROL_MISSING = 60
    OFFSET_RANGE_ERROR = 61
    NAMING_VIOLATION = 64
    OBJECT_CLASS_VIOLATION = 65
    NOT_ALLOWED_ON_NON_LEAF = 66
    NOT_ALLOWED_ON_RDN = 67
    ENTRY_ALREADY_EXISTS = 68
    OBJECT_CLASS_MODS_PROHIBITED = 69
    RESULTS_TOO_LARGE = 70
    AFFECTS_MULTIPLE_DSAS = 71
    VIRTUAL_LIST_VIEW_ERROR_OR_CONTROL_ERROR = 76
    OTHER = 80
    SERVER_DOWN = 81
    LOCAL_ERROR = 82
    ENCODING_ERROR = 83
    DECODING_ERROR = 84
    TIMEOUT = 85
    AUTH_UNKNOWN = 86
    FILTER_ERROR = 87
    USER_CANCELED = 88
    PARAM_ERROR = 89
    NO_MEMORY = 90
    CONNECT_ERROR = 91
    NOT_SUPPORTED = 92
    CONTROL_NOT_FOUND = 93
    NO_RESULTS_RETURNED = 94
    MORE_RESULTS_TO_RETURN = 95
    CLIENT_LOOP = 96
    REFERRAL_LIMIT_EXCEEDED = 97
    INVALID_RESPONSE = 100
    AMBIGUOUS_RESPONSE = 101
    TLS_NOT_SUPPORTED = 112
    INTERMEDIATE_RESPONSE = 113
    UNKNOWN_TYPE = 114
    CANCELED = 118
    NO_SUCH_OPERATION = 119
    TOO_LATE = 120
    CANNOT_CANCEL = 121
    ASSERTION_FAILED = 122
    AUTHORIZATION_DENIED = 123
    SYNC_REFRESH_REQUIRED = 4096

    ERROR_NETWORK = 200
    ERROR_FILTER_COMPILE = 201
    ERROR_FILTER_DECOMPILE = 202
    ERROR_DEBUGGING = 203
    ERROR_UNEXPECTED_MESSAGE = 204
    ERROR_UNEXPECTED_RESPONSE = 205
    ERROR_EMPTY_PASSWORD = 206


_DESCRIPTIONS = {
    ResultCode.SUCCESS: "Success",
    ResultCode.OPERATIONS_ERROR: "Operations Error",
    ResultCode.PROTOCOL_ERROR: "Protocol Error",
    ResultCode.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    ResultCode.SIZE_LIMIT_EXCEEDED: "Size Limit Exceeded",
    ResultCode.COMPARE_FALSE: "Compare False",
    ResultCode.COMPARE_TRUE: "Compare True",
    ResultCode.AUTH_METHOD_NOT_SUPPORTED: "Auth Method Not Supported",
    ResultCode.STRONG_AUTH_REQUIRED: "Strong Auth Required",
    ResultCode.REFERRAL: "Referral",
    ResultCode.ADMIN_LIMIT_EXCEEDED: "Admin Limit Exceeded",
    ResultCode.UNAVAILABLE_CRITICAL_EXTENSION: "Unavailable Critical Extension",
    ResultCode.CONFIDENTIALITY_REQUIRED: "Confidentiality Required",
    ResultCode.SASL_BIND_IN_PROGRESS: "Sasl Bind In Progress",
    ResultCode.NO_SUCH_ATTRIBUTE: "No Such Attribute",
    ResultCode.UNDEFINED_ATTRIBUTE_TYPE: "Undefined Attribute Type",
    ResultCode.INAPPROPRIATE_MATCHING: "Inappropriate Matching",
    ResultCode.CONSTRAINT_VIOLATION: "Constraint Violation",
    ResultCode.ATTRIBUTE_OR_VALUE_EXISTS: "Attribute Or Value Exists",
    ResultCode.INVALID_ATTRIBUTE_SYNTAX: "Invalid Attribute Syntax",
    ResultCode.NO_SUCH_OBJECT: "No Such Object",
    ResultCode.ALIAS_PROBLEM: "Alias Problem",
    ResultCode.INVALID_DN_SYNTAX: "Invalid DN Syntax",
    ResultCode.IS_LEAF: "Is Leaf",
    ResultCode.ALIAS_DEREFERENCING_PROBLEM: "Alias Dereferencing Problem",
    ResultCode.INAPPROPRIATE_AUTHENTICATION: "Inappropriate Authentication",
    ResultCode.INVALID_CREDENTIALS: "Invalid Credentials",
    ResultCode.INSUFFICIENT_ACCESS_RIGHTS: "Insufficient Access Rights",
    ResultCode.BUSY: "Busy",
    ResultCode.UNAVAILABLE: "Unavailable",
    ResultCode.UNWILLING_TO_PERFORM: "Unwilling To Perform",
    ResultCode.LOOP_DETECT: "Loop Detect",
    ResultCode.SORT_CONTROL_MISSING: "Sort Control Missing",
    ResultCode.OFFSET_RANGE_ERROR: "Result Offset Range Error",
    ResultCode.NAMING_VIOLATION: "Naming Violation",
    ResultCode.OBJECT_CLASS_VIOLATION: "Object Class Violation",
    ResultCode.RESULTS_TOO_LARGE: "Results Too Large",
    ResultCode.NOT_ALLOWED_ON_NON_LEAF: "Not Allowed On Non Leaf",
    ResultCode.NOT_ALLOWED_ON_RDN: "Not Allowed On RDN",
    ResultCode.ENTRY_ALREADY_EXISTS: "Entry Already Exists",
    ResultCode.OBJECT_CLASS_MODS_PROHIBITED: "Object Class Mods Prohibited",
    ResultCode.AFFECTS_MULTIPLE_DSAS: "Affects Multiple DSAs",
    ResultCode.VIRTUAL_LIST_VIEW_ERROR_OR_CONTROL_ERROR: "Failed because of a problem related to the virtual list view",
    ResultCode.OTHER: "Other",
    ResultCode.SERVER_DOWN: "Cannot establish a connection",
    ResultCode.LOCAL_ERROR: "An error occurred",
    ResultCode.ENCODING_ERROR: "LDAP encountered an error while encoding",
    ResultCode.DECODING_ERROR: "LDAP encountered an error while decoding",
    ResultCode.TIMEOUT: "LDAP timeout while waiting for a response from the server",
    ResultCode.AUTH_UNKNOWN: "The auth method requested in a bind request is unknown",
    ResultCode.FILTER_ERROR: "An error occurred while encoding the given search filter",
    ResultCode.USER_CANCELED: "The user canceled the operation",
    ResultCode.PARAM_ERROR: "An invalid parameter was specified",
    ResultCode.NO_MEMORY: "Out of memory error",
    ResultCode.CONNECT_ERROR: "A connection to the server could not be established",
    ResultCode.NOT_SUPPORTED: "An attempt has been made to use a feature not supported LDAP",
    ResultCode.CONTROL_NOT_FOUND: "The controls required to perform the requested operation were not found",
    ResultCode.NO_RESULTS_RETURNED: "No results were returned from the server",
    ResultCode.MORE_RESULTS_TO_RETURN: "There are more results in the chain of results",
    ResultCode.CLIENT_LOOP: "A loop has been detected. For example when following referrals",
    ResultCode.REFERRAL_LIMIT_EXCEEDED: "The referral hop limit has been exceeded",
    ResultCode.CANCELED: "Operation was canceled",
    ResultCode.NO_SUCH_OPERATION: "Server has no knowledge of the operation requested for cancellation",
    ResultCode.TOO_LATE: "Too late to cancel the outstanding operation",
    ResultCode.CANNOT_CANCEL: (
        "The identified operation does not support cancellation or the cancel operation cannot be performed"
    ),
    ResultCode.ASSERTION_FAILED: (
        "An assertion control given in the LDAP operation evaluated to false "
        "causing the operation to not be performed"
    ),
    ResultCode.SYNC_REFRESH_REQUIRED: "Refresh Required",
    ResultCode.INVALID_RESPONSE: "Invalid Response",
    ResultCode.AMBIGUOUS_RESPONSE: "Ambiguous Response",
    ResultCode.TLS_NOT_SUPPORTED: "Tls Not Supported",
    ResultCode.INTERMEDIATE_RESPONSE: "Intermediate Response",
    ResultCode.UNKNOWN_TYPE: "Unknown Type",
    ResultCode.AUTHORIZATION_DENIED: "Authorization Denied",
    ResultCode.ERROR_NETWORK: "Network Error",
    ResultCode.ERROR_FILTER_COMPILE: "Filter Compile Error",
    ResultCode.ERROR_FILTER_DECOMPILE: "Filter Decompile Error",
    ResultCode.ERROR_DEBUGGING: "Debugging Error",
    ResultCode.ERROR_UNEXPECTED_MESSAGE: "Unexpected Message",
    ResultCode.ERROR_UNEXPECTED_RESPONSE: "Unexpected Response",
    ResultCode.ERROR_EMPTY_PASSWORD: "Empty password not allowed by the client",
}


def describe_result_code(code: int) -> str:
    """Return the human-readable description of a result code, or ""."""
    return _DESCRIPTIONS.get(int(code), "")


def _as_code(code: int) -> int:
    try:
        return ResultCode(code)
    except ValueError:
        return int(code)


class LDAPError(Exception):
    """An LDAP operation failed with a result code."""

    def __init__(
        self,
        result_code: int,
        err: Union[str, BaseException],
        *,
        matched_dn: str = "",
        packet: Optional[Packet] = None,
    ) -> None:
        self.result_code = _as_code(int(result_code) & 0xFFFF)
        self.err = err
        self.matched_dn = matched_dn
        self.packet = packet
        super().__init__(self.result_code, str(err))
        if isinstance(err, BaseException):
            self.__cause__ = err

    @property
    def message(self) -> str:
        """The underlying diagnostic message."""
        return str(self.err)

    def __str__(self) -> str:
        return (
            f'LDAP Result Code {int(self.result_code)} '
            f'"{describe_result_code(self.result_code)}": {self.message}'
        )


def get_ldap_error(packet: Optional[Packet]) -> Optional[LDAPError]:
    """Build the error described by an LDAPResult message, or None on success."""
    if packet is None:
        return LDAPError(ResultCode.ERROR_UNEXPECTED_RESPONSE, "Empty packet")

    if len(packet.children) >= 2:
        response = packet.children[1]
        if response is None:
            return LDAPError(ResultCode.ERROR_UNEXPECTED_RESPONSE, "Empty response in packet", packet=packet)
        if (
            response.class_type == ClassType.APPLICATION
            and response.tag_type == TagType.CONSTRUCTED
            and len(response.children) >= 3
            and isinstance(response.children[0].value, int)
        ):
            code = response.children[0].value & 0xFFFF
            if code == ResultCode.SUCCESS:
                return None
            matched = response.children[1].value
            diagnostic = response.children[2].value
            return LDAPError(
                code,
                "" if diagnostic is None else str(diagnostic),
                matched_dn="" if matched is None else str(matched),
                packet=packet,
            )

    return LDAPError(ResultCode.ERROR_NETWORK, "Invalid packet format", packet=packet)


def is_error_any_of(err: Optional[BaseException], *args: int) -> bool:
    """True if ``err`` is an LDAPError carrying any of the given result codes."""
    if not isinstance(err, LDAPError):
        return False
    return any(err.result_code == code for code in args)


def is_error_with_code(err: Optional[BaseException], code: int) -> bool:
    """True if ``err`` is an LDAPError carrying the given result code."""
    return is_error_any_of(err, code)