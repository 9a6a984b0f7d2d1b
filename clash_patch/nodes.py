# -*- coding: utf-8 -*-
"""
List the proxy nodes a subscription offers (name / type / server / port),
so a caller can pick one for the `PROXY` selector before merging.
"""

from __future__ import annotations

import logging
from typing import Dict, List, NamedTuple, Optional

from .sections import indent_of, scan_lines, split_lines
from .yamlish import parse_flow_mapping, split_key_value, strip_inline_comment, unquote

logger = logging.getLogger(__name__)


class ProxyNode(NamedTuple):
    name: str
    type: str
    server: str
    port: int


def _make_node(fields: Dict[str, str]) -> Optional[ProxyNode]:
    try:
        port = int(fields["port"])
        return ProxyNode(fields["name"], fields["type"], fields["server"], port)
    except (KeyError, ValueError):
        if fields:
            logger.debug("nodes: incomplete proxy %r", fields.get("name"))
        return None


def _put(fields: Dict[str, str], s: str) -> None:
    kv = split_key_value(strip_inline_comment(s))
    if kv is None:
        return
    key, raw = kv
    if key:
        fields[key] = unquote(strip_inline_comment(raw))


def parse_nodes(text: str) -> List[ProxyNode]:
    lines = split_lines(text)
    sec = scan_lines(lines).find("proxies")
    if sec is None:
        return []

    nodes: List[ProxyNode] = []
    current: Dict[str, str] = {}
    key_indent: Optional[int] = None

    def flush() -> None:
        node = _make_node(current)
        if node is not None:
            nodes.append(node)

    for ln in lines[sec.start + 1 : sec.end]:
        s = ln.strip()
        if not s or s.startswith("#"):
            continue
        indent = indent_of(ln)
        if s == "-" or s.startswith("- "):
            flush()
            current = {}
            rest = s[1:].strip()
            key_indent = indent + 2
            pairs = parse_flow_mapping(rest) if rest else None
            if pairs is not None:
                for key, raw in pairs:
                    current[key] = unquote(raw)
            elif rest:
                _put(current, rest)
            continue
        if key_indent is None:
            continue
        if indent != key_indent:
            # nested options (ws-opts:, plugin-opts:, ...) are not node fields
            if indent < key_indent:
                key_indent = indent
            else:
                continue
        _put(current, s)
    flush()
    return nodes


def choose_node(nodes: List[ProxyNode], current: Optional[str]) -> Optional[str]:
    """
    Keep `current` when the subscription still offers it, otherwise fall back to
    the first node (None for an empty subscription).
    """
    names = [n.name for n in nodes]
    if current and current in names:
        return current
    return names[0] if names else None
