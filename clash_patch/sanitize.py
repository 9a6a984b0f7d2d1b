# -*- coding: utf-8 -*-
"""
Idempotent corrections for settings that break the tunnel runtime.

Every substitution matches only the undesired value and every insertion is
skipped once its key exists anywhere in the document, so running this twice is
the same as running it once.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Tuple

from .sections import scan_lines, split_lines
from .settings import TUN_DNS

logger = logging.getLogger(__name__)


class Substitution(NamedTuple):
    match: str
    replace: str
    note: str


class Insertion(NamedTuple):
    key: str
    line: str
    anchor: str
    note: str


def substitutions(tun_dns: str = TUN_DNS) -> List[Substitution]:
    """Substitution table; `listen:` is moved to `tun_dns` so it agrees with dns-hijack."""
    return [
        # geoip lookups block startup on a geoip.metadb download
        Substitution("geoip: true", "geoip: false", "dns: disabled fallback-filter geoip"),
        Substitution("geo-auto-update: true", "geo-auto-update: false", "disabled geo-auto-update"),
        Substitution("listen: 0.0.0.0:53", f"listen: {tun_dns}:53", "dns: listen moved to tunnel DNS"),
        Substitution("listen: 127.0.0.1:53", f"listen: {tun_dns}:53", "dns: listen moved to tunnel DNS"),
        Substitution(
            "- https://dns.google/dns-query",
            "- https://8.8.8.8/dns-query",
            "dns: fallback dns.google replaced by IP endpoint",
        ),
    ]


SUBSTITUTIONS: List[Substitution] = substitutions()

INSERTIONS: List[Insertion] = [
    Insertion("geo-auto-update", "geo-auto-update: false", "dns", "inserted geo-auto-update: false"),
]


def _substitute_line(line: str, rule: Substitution) -> str:
    body = line.rstrip("\r\n")
    ending = line[len(body) :]
    indent = body[: len(body) - len(body.lstrip(" \t"))]
    trailing = body[len(body.rstrip(" \t")) :]
    return f"{indent}{rule.replace}{trailing}{ending}"


def _apply_substitutions(lines: List[str], table: List[Substitution]) -> Tuple[List[str], List[str]]:
    notes: List[str] = []
    out: List[str] = []
    for ln in lines:
        s = ln.strip()
        for rule in table:
            if s == rule.match and rule.replace != rule.match:
                ln = _substitute_line(ln, rule)
                if rule.note not in notes:
                    notes.append(rule.note)
                break
        out.append(ln)
    return out, notes


def _has_key(lines: List[str], key: str) -> bool:
    prefix = f"{key}:"
    return any(ln.strip().startswith(prefix) for ln in lines)


def _apply_insertion(lines: List[str], rule: Insertion) -> Tuple[List[str], bool]:
    if _has_key(lines, rule.key):
        return lines, False
    anchor = scan_lines(lines).find(rule.anchor)
    if anchor is None:
        logger.debug("sanitize: no %r section, skipping %s", rule.anchor, rule.key)
        return lines, False
    out = list(lines)
    out[anchor.start : anchor.start] = [f"{rule.line}\n", "\n"]
    return out, True


def sanitize_with_notes(text: str, tun_dns: str = TUN_DNS) -> Tuple[str, List[str]]:
    table = SUBSTITUTIONS if tun_dns == TUN_DNS else substitutions(tun_dns)
    lines, notes = _apply_substitutions(split_lines(text), table)
    for rule in INSERTIONS:
        lines, ch = _apply_insertion(lines, rule)
        if ch:
            notes.append(rule.note)
    return "".join(lines), notes


def sanitize(text: str, tun_dns: str = TUN_DNS) -> str:
    return sanitize_with_notes(text, tun_dns)[0]
