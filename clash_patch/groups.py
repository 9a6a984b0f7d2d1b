# -*- coding: utf-8 -*-
"""
`proxy-groups:` <-> list of ProxyGroupRecord.

Parsing is a reducer over the document's lines. The scan state moves through
    outside -> awaiting -> record <-> members
                              `-> opaque (block scalars / nested values we don't model)
and a finished record is emitted whenever the next item starts or the section ends.

Accepted item shapes:
    - name: HK
      type: url-test
      proxies:
        - hk-01
      url: http://www.gstatic.com/generate_204
      interval: 300
    -
      name: 'US'
      proxies: [us-01, us-02]
    - {name: Auto, type: fallback, proxies: [a, b]}
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import List, NamedTuple, Optional, Tuple

from .sections import indent_of, is_top_level, section_key, splice_section, split_lines
from .yamlish import (
    is_block_scalar,
    parse_flow_list,
    parse_flow_mapping,
    quote,
    split_key_value,
    strip_inline_comment,
    unquote,
)

logger = logging.getLogger(__name__)

SECTION = "proxy-groups"
EMPTY = "proxy-groups: []"

OUTSIDE = "outside"
AWAITING = "awaiting"
RECORD = "record"
MEMBERS = "members"
OPAQUE = "opaque"


class ProxyGroupRecord(NamedTuple):
    name: str
    type: str
    proxies: List[str]
    url: Optional[str] = None
    interval: Optional[int] = None


class _Draft(NamedTuple):
    name: str = ""
    type: str = ""
    proxies: Tuple[str, ...] = ()
    url: Optional[str] = None
    interval: Optional[int] = None

    def finish(self) -> Optional[ProxyGroupRecord]:
        if not self.name:
            return None
        return ProxyGroupRecord(self.name, self.type, list(self.proxies), self.url, self.interval)


class _Scan(NamedTuple):
    phase: str = OUTSIDE
    draft: Optional[_Draft] = None
    records: Tuple[ProxyGroupRecord, ...] = ()
    item_indent: int = 0
    opaque_indent: int = 0


def _parse_interval(raw: str) -> Optional[int]:
    try:
        return int(unquote(raw))
    except ValueError:
        return None


def _flush(st: _Scan) -> _Scan:
    if st.draft is None:
        return st
    rec = st.draft.finish()
    if rec is None:
        logger.debug("proxy-groups: dropping item without name: %r", st.draft)
        return st._replace(draft=None)
    return st._replace(draft=None, records=st.records + (rec,))


def _apply_key(st: _Scan, key: str, raw: str, indent: int) -> _Scan:
    draft = st.draft or _Draft()
    value = strip_inline_comment(raw).strip()
    if is_block_scalar(value):
        return st._replace(draft=draft, phase=OPAQUE, opaque_indent=indent)
    if key == "name":
        return st._replace(draft=draft._replace(name=unquote(value)), phase=RECORD)
    if key == "type":
        return st._replace(draft=draft._replace(type=unquote(value)), phase=RECORD)
    if key == "url":
        return st._replace(draft=draft._replace(url=unquote(value) if value else None), phase=RECORD)
    if key == "interval":
        return st._replace(draft=draft._replace(interval=_parse_interval(value)), phase=RECORD)
    if key == "proxies":
        if not value:
            return st._replace(draft=draft._replace(proxies=()), phase=MEMBERS)
        members = parse_flow_list(value)
        if members is None:
            logger.debug("proxy-groups: unreadable proxies value %r", value)
            members = []
        return st._replace(draft=draft._replace(proxies=tuple(members)), phase=RECORD)
    if not value:
        # nested mapping/list under a key we don't model (use:, health-check:, ...)
        return st._replace(draft=draft, phase=OPAQUE, opaque_indent=indent)
    return st._replace(draft=draft, phase=RECORD)


def _start_item(st: _Scan, rest: str, indent: int) -> _Scan:
    st = _flush(st)._replace(draft=_Draft(), phase=RECORD, item_indent=indent)
    rest = rest.strip()
    if not rest:
        return st
    pairs = parse_flow_mapping(rest)
    if pairs is not None:
        for key, raw in pairs:
            st = _apply_key(st, key, raw, indent)
        return st._replace(phase=RECORD)
    kv = split_key_value(rest)
    if kv is None:
        logger.debug("proxy-groups: unreadable item %r", rest)
        return st
    return _apply_key(st, kv[0], kv[1], indent + 2)


def _step(st: _Scan, line: str) -> _Scan:
    if is_top_level(line):
        st = _flush(st)
        if section_key(line) == SECTION:
            return _Scan(phase=AWAITING, records=st.records)
        return _Scan(phase=OUTSIDE, records=st.records)
    if st.phase == OUTSIDE:
        return st
    s = line.strip()
    if not s or s.startswith("#"):
        return st
    indent = indent_of(line)
    if st.phase == OPAQUE:
        if indent > st.opaque_indent:
            return st
        st = st._replace(phase=RECORD)

    if s.startswith("-") and (len(s) == 1 or s[1] in " \t"):
        rest = s[1:]
        if st.draft is None or indent <= st.item_indent:
            return _start_item(st, rest, indent)
        if st.phase == MEMBERS:
            member = unquote(strip_inline_comment(rest))
            if member:
                draft = st.draft._replace(proxies=st.draft.proxies + (member,))
                return st._replace(draft=draft)
            return st
        logger.debug("proxy-groups: ignoring nested item %r", s)
        return st

    if st.draft is None:
        logger.debug("proxy-groups: ignoring line outside any item %r", s)
        return st
    kv = split_key_value(s)
    if kv is None:
        logger.debug("proxy-groups: skipping malformed line %r", s)
        return st._replace(phase=RECORD if st.phase == MEMBERS else st.phase)
    return _apply_key(st, kv[0], kv[1], indent)


def parse_proxy_groups(text: str) -> List[ProxyGroupRecord]:
    final = _flush(reduce(_step, split_lines(text), _Scan()))
    return list(final.records)


def group_names(text: str) -> List[str]:
    return [g.name for g in parse_proxy_groups(text)]


def render_group(rec: ProxyGroupRecord) -> str:
    out = [f"  - name: {quote(rec.name)}\n", f"    type: {quote(rec.type)}\n"]
    if rec.proxies:
        out.append("    proxies:\n")
        out.extend(f"      - {quote(p)}\n" for p in rec.proxies)
    else:
        out.append("    proxies: []\n")
    if rec.url is not None:
        out.append(f"    url: {quote(rec.url)}\n")
    if rec.interval is not None:
        out.append(f"    interval: {rec.interval}\n")
    return "".join(out)


def render_proxy_groups(records: List[ProxyGroupRecord]) -> str:
    if not records:
        return EMPTY + "\n"
    return f"{SECTION}:\n" + "".join(render_group(r) for r in records)


def update_proxy_groups(records: List[ProxyGroupRecord], text: str) -> str:
    """
    Write `records` back into `text`. An existing `proxy-groups:` section is replaced
    in place; otherwise the section goes right before `rules:` (or at the end).
    """
    return splice_section(text, SECTION, render_proxy_groups(list(records)), anchor="rules")
