"""
Small validation helpers shared by GlideAccess and GlideRecord.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+")
_SYS_ID_RE = re.compile(r"[a-z0-9]{32}")

# Separator of the encoded query language; part of the wire format.
QUERY_SEPARATOR = "^"

DEFAULT_DOMAIN = "service-now.com"


def is_valid_table(name: Any) -> bool:
    return isinstance(name, str) and bool(_IDENTIFIER_RE.fullmatch(name))


def is_valid_column(name: Any) -> bool:
    return isinstance(name, str) and bool(_IDENTIFIER_RE.fullmatch(name))


def is_valid_sys_id(sys_id: Any) -> bool:
    return isinstance(sys_id, str) and bool(_SYS_ID_RE.fullmatch(sys_id))


def instance_host(instance: str) -> str:
    """
    Expand a bare instance name (``dev12345``) to its service-now.com host.
    Anything containing a dot is treated as a full hostname.
    """
    instance = (instance or "").strip()
    if instance and "." not in instance:
        return f"{instance}.{DEFAULT_DOMAIN}"
    return instance


def join_encoded_query(clauses: Iterable[str]) -> str:
    return QUERY_SEPARATOR.join(clauses)
