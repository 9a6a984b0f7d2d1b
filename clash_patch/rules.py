# -*- coding: utf-8 -*-
"""
`rules:` <-> list of RuleRecord.

Each item is one comma-separated line:
    - DOMAIN-SUFFIX,example.com,PROXY
    - IP-CIDR,10.0.0.0/8,DIRECT,no-resolve
    - MATCH,DIRECT
Order is the engine's priority order and is never changed here.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from .sections import scan_lines, splice_section, split_lines
from .yamlish import strip_inline_comment, unquote

logger = logging.getLogger(__name__)

SECTION = "rules"
EMPTY = "rules: []"
NO_RESOLVE = "no-resolve"


class RuleRecord(NamedTuple):
    type: str
    value: str
    target: str
    no_resolve: bool = False


def split_rule_fields(payload: str) -> List[str]:
    """
    Split on commas outside parentheses, so logical rules such as
    `AND,((DOMAIN,a.com),(NETWORK,UDP)),REJECT` keep their payload intact.
    """
    fields: List[str] = []
    depth = 0
    cur = ""
    for ch in payload:
        if ch == "(":
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
        if ch == "," and depth == 0:
            fields.append(cur.strip())
            cur = ""
            continue
        cur += ch
    fields.append(cur.strip())
    return fields


def parse_rule_line(line: str) -> Optional[RuleRecord]:
    s = strip_inline_comment(line).strip()
    if not s.startswith("-"):
        return None
    payload = unquote(s[1:].strip())
    if not payload:
        return None
    fields = split_rule_fields(payload)
    kind = fields[0]
    if kind.upper() == "MATCH":
        if len(fields) < 2 or not fields[1]:
            return None
        return RuleRecord(kind, "", fields[1], False)
    if len(fields) < 3 or not kind or not fields[2]:
        return None
    no_resolve = any(f == NO_RESOLVE for f in fields[3:])
    return RuleRecord(kind, fields[1], fields[2], no_resolve)


def parse_rules(text: str) -> List[RuleRecord]:
    lines = split_lines(text)
    sec = scan_lines(lines).find(SECTION)
    if sec is None:
        return []
    records: List[RuleRecord] = []
    # the key line may carry an inline list: `rules: []`
    for idx in range(sec.start + 1, sec.end):
        ln = lines[idx]
        s = ln.strip()
        if not s or s.startswith("#"):
            continue
        rec = parse_rule_line(ln)
        if rec is None:
            logger.debug("rules: skipping malformed line %d: %r", idx + 1, s)
            continue
        records.append(rec)
    return records


def render_rule(rec: RuleRecord) -> str:
    if rec.type.upper() == "MATCH":
        return f"  - {rec.type},{rec.target}"
    parts = [rec.type, rec.value, rec.target]
    if rec.no_resolve:
        parts.append(NO_RESOLVE)
    return "  - " + ",".join(parts)


def render_rules(records: List[RuleRecord]) -> str:
    if not records:
        return EMPTY + "\n"
    out = [f"{SECTION}:\n"]
    out.extend(render_rule(r) + "\n" for r in records)
    return "".join(out)


def update_rules(records: List[RuleRecord], text: str) -> str:
    """
    Write `records` back into `text`: replace the existing `rules:` section in place,
    or append one at the end of the document.
    """
    return splice_section(text, SECTION, render_rules(list(records)))
