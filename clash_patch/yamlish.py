# -*- coding: utf-8 -*-
"""
Scalar helpers for the restricted YAML dialect: quoting, inline comments,
flow lists `[a, b]` and flow mappings `{k: v, ...}`. Nothing here resolves
anchors, tags or multi-line scalars.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

_BLOCK_SCALAR_RE = re.compile(r"^[|>][+-]?[0-9]?[+-]?$")
_PLAIN_UNSAFE_START = set("!&*[]{}|>'\"%@`,?:-#")


def unquote(value: str) -> str:
    v = value.strip()
    if len(v) >= 2 and v[0] == v[-1] == "'":
        return v[1:-1].replace("''", "'")
    if len(v) >= 2 and v[0] == v[-1] == '"':
        return v[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return v


def needs_quotes(value: str) -> bool:
    if value == "" or value != value.strip():
        return True
    if value[0] in _PLAIN_UNSAFE_START:
        return True
    if ": " in value or " #" in value or value.endswith(":"):
        return True
    # would otherwise load as a bool/null
    return value.lower() in {"true", "false", "yes", "no", "on", "off", "null", "~"}


def quote(value: str) -> str:
    if not needs_quotes(value):
        return value
    return "'" + value.replace("'", "''") + "'"


def strip_inline_comment(line: str) -> str:
    """Drop a ` # comment` tail that is not inside quotes."""
    in_quote: Optional[str] = None
    for i, ch in enumerate(line):
        if in_quote:
            if ch == in_quote:
                in_quote = None
        elif ch in "\"'":
            in_quote = ch
        elif ch == "#" and (i == 0 or line[i - 1] in " \t"):
            return line[:i].rstrip()
    return line


def split_flow(inner: str) -> List[str]:
    """
    Split the interior of a flow collection on top-level commas,
    respecting quotes and nested brackets.
    e.g. `name: "a, b", proxies: [x, y]` -> [`name: "a, b"`, `proxies: [x, y]`]
    """
    parts: List[str] = []
    cur = ""
    in_quote: Optional[str] = None
    depth = 0
    for ch in inner:
        if in_quote:
            cur += ch
            if ch == in_quote:
                in_quote = None
        elif ch in "\"'":
            in_quote = ch
            cur += ch
        elif ch in "[{":
            depth += 1
            cur += ch
        elif ch in "]}":
            depth -= 1
            cur += ch
        elif ch == "," and depth == 0:
            parts.append(cur.strip())
            cur = ""
        else:
            cur += ch
    last = cur.strip()
    if last:
        parts.append(last)
    return parts


def parse_flow_list(value: str) -> Optional[List[str]]:
    v = value.strip()
    if not (v.startswith("[") and v.endswith("]")):
        return None
    return [unquote(p) for p in split_flow(v[1:-1]) if p]


def split_key_value(s: str) -> Optional[Tuple[str, str]]:
    """
    `key: value` -> (key, raw value). The separator is the first `:` followed by
    whitespace or end of line, so `url: http://x` splits at the key.
    """
    s = s.strip()
    if s[:1] in "\"'":
        q = s[0]
        end = s.find(q, 1)
        if end < 0 or s[end + 1 : end + 2] != ":":
            return None
        return s[1:end], s[end + 2 :].strip()
    for i, ch in enumerate(s):
        if ch == ":" and (i + 1 == len(s) or s[i + 1] in " \t"):
            key = s[:i].strip()
            return (key, s[i + 1 :].strip()) if key else None
    return None


def parse_flow_mapping(value: str) -> Optional[List[Tuple[str, str]]]:
    v = value.strip()
    if not (v.startswith("{") and v.endswith("}")):
        return None
    pairs: List[Tuple[str, str]] = []
    for part in split_flow(v[1:-1]):
        kv = split_key_value(part)
        if kv:
            pairs.append(kv)
    return pairs


def is_block_scalar(value: str) -> bool:
    return bool(_BLOCK_SCALAR_RE.match(strip_inline_comment(value).strip()))
