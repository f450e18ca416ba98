"""LDAP v3 building blocks: BER packets, DNs, search filters, request encoding and response parsing."""

__version__ = "0.1.0"

__all__ = [
    "ber",
    "errors",
    "request",
    "dn",
    "filter",
    "search",
    "modify",
    "moddn",
    "unbind",
    "whoami",
]