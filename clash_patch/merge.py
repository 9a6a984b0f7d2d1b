# -*- coding: utf-8 -*-
"""
Merge a subscription document into the local config.

Result layout:
    <local header: ports / tun / dns / ...>

    <remote proxies:>            (or `proxies: []`)

    proxy-groups:
      - name: PROXY              (synthesized select: chosen node | first remote group, DIRECT)
      <remote group items>       (re-indented to 2 spaces; a remote PROXY item is dropped)

    <remote proxy-providers:>    (if any)

    <local rule-providers: etc.> (if any)

    <local rules:, byte-identical>

Routing rules are never taken from the subscription.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .groups import SECTION, ProxyGroupRecord, group_names, parse_proxy_groups, render_proxy_groups
from .sections import extract_blocks, indent_of, scan_lines, split_lines, strip_block

logger = logging.getLogger(__name__)

SELECTOR_GROUP = "PROXY"
BUILTIN_TARGETS = {"DIRECT", "REJECT"}
REMOTE_SECTIONS = ("proxies", "proxy-groups", "proxy-providers")
ITEM_INDENT = 2


def fallback_group(remote_groups_text: str) -> Optional[str]:
    groups = parse_proxy_groups(remote_groups_text)
    for g in groups:
        if g.name not in BUILTIN_TARGETS and g.name != SELECTOR_GROUP:
            return g.name
    # the subscription's own PROXY is replaced, so point at its first real member
    for g in groups:
        if g.name == SELECTOR_GROUP:
            for member in g.proxies:
                if member not in BUILTIN_TARGETS and member != SELECTOR_GROUP:
                    return member
    return None


def selector_members(remote_groups_text: str, selected_node: Optional[str] = None) -> List[str]:
    members: List[str] = []
    if selected_node and selected_node.strip():
        members.append(selected_node)
    else:
        fb = fallback_group(remote_groups_text)
        if fb:
            members.append(fb)
    members.append("DIRECT")
    return members


def _is_item(line: str) -> bool:
    s = line.strip()
    return s.startswith("-") and (len(s) == 1 or s[1] in " \t")


def _shift(line: str, by: int) -> str:
    if not line.strip():
        return line
    if by >= 0:
        return " " * by + line
    return line[min(-by, indent_of(line)) :]


def _group_items(block: str) -> List[str]:
    """
    Split the remote `proxy-groups:` body into one chunk per item, each re-indented so
    its dash sits where `render_group` puts the synthesized selector's.
    """
    items: List[Tuple[int, List[str]]] = []
    for ln in split_lines(block)[1:]:
        if _is_item(ln) and (not items or indent_of(ln) <= items[-1][0]):
            items.append((indent_of(ln), []))
        if items:
            items[-1][1].append(ln)
    chunks = []
    for dash, lines in items:
        chunk = strip_block("".join(_shift(ln, ITEM_INDENT - dash) for ln in lines))
        if SELECTOR_GROUP in group_names(f"{SECTION}:\n{chunk}\n"):
            logger.debug("merge: replacing the subscription's own %s group", SELECTOR_GROUP)
            continue
        chunks.append(chunk)
    return chunks


def _local_parts(local: str) -> Tuple[str, List[str], str]:
    lines = split_lines(local)
    layout = scan_lines(lines)
    proxies = layout.find("proxies")
    rules = layout.find("rules")
    rules_at = rules.start if rules is not None else len(lines)
    cut = proxies.start if proxies is not None else len(lines)
    cut = min(cut, rules_at)

    header = strip_block("".join(lines[:cut]))
    tail = "".join(lines[rules_at:])

    # sections between the header and rules that the subscription doesn't own (rule-providers, ...)
    extras: List[str] = []
    for sec in layout.sections:
        if cut <= sec.start < rules_at and sec.name not in REMOTE_SECTIONS:
            block = strip_block("".join(lines[sec.start : sec.end]))
            if block:
                extras.append(block)
    return header, extras, tail


def merge(local: str, remote: str, selected_node: Optional[str] = None) -> str:
    """
    Build a new document from `local`'s settings and rules plus `remote`'s proxies/groups.
    Neither input is modified; malformed remote content degrades to empty sections.
    """
    blocks = extract_blocks(remote, REMOTE_SECTIONS)
    header, extras, tail = _local_parts(local)

    proxies_block = strip_block(blocks.get("proxies", "")) or "proxies: []"
    if "proxies" not in blocks:
        logger.debug("merge: remote document has no proxies section")

    groups_block = blocks.get("proxy-groups", "")
    selector = ProxyGroupRecord(
        name=SELECTOR_GROUP,
        type="select",
        proxies=selector_members(groups_block, selected_node),
    )
    groups_text = render_proxy_groups([selector]).rstrip("\n")
    children = _group_items(groups_block) if groups_block else []
    if children:
        groups_text += "\n" + "\n".join(children)

    parts: List[str] = []
    if header:
        parts.append(header)
    parts.append(proxies_block)
    parts.append(groups_text)
    providers = strip_block(blocks.get("proxy-providers", ""))
    if providers:
        parts.append(providers)
    parts.extend(extras)

    body = "\n\n".join(parts)
    if tail:
        return body + "\n\n" + tail
    return body + "\n"
