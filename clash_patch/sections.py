# -*- coding: utf-8 -*-
"""
Top-level section scanning for Clash-style YAML documents.

A document is treated as a list of lines (keepends=True). A line opens a new
section when it starts at column 0 and is neither blank nor a comment:

    mode: rule          <- marker, section "mode"
    dns:                <- marker, section "dns"
      enable: true      <- extends "dns"

    # note             <- extends "dns" (comments never open a section)
    rules:              <- marker, section "rules"
    - MATCH,DIRECT      <- extends "rules" (column-0 sequence item)
"""

from __future__ import annotations

from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple


class Span(NamedTuple):
    start: int
    end: int  # exclusive


class Section(NamedTuple):
    name: str
    start: int
    end: int  # exclusive

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)


class Layout(NamedTuple):
    header: Span
    sections: List[Section]

    def find(self, name: str) -> Optional[Section]:
        for sec in self.sections:
            if sec.name == name:
                return sec
        return None

    def names(self) -> List[str]:
        return [sec.name for sec in self.sections]


def split_lines(text: str) -> List[str]:
    return text.splitlines(keepends=True)


def is_top_level(line: str) -> bool:
    if not line.strip():
        return False
    if line[0] in (" ", "\t", "#"):
        return False
    # block sequence items may sit at their parent's indentation
    if line.startswith("-"):
        return False
    return True


def section_key(line: str) -> str:
    return line.split(":", 1)[0].strip()


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def scan_lines(lines: List[str]) -> Layout:
    sections: List[Section] = []
    current: Optional[Tuple[str, int]] = None
    header_end = len(lines)
    for i, ln in enumerate(lines):
        if not is_top_level(ln):
            continue
        if current is None:
            header_end = i
        else:
            sections.append(Section(current[0], current[1], i))
        current = (section_key(ln), i)
    if current is not None:
        sections.append(Section(current[0], current[1], len(lines)))
    return Layout(Span(0, header_end), sections)


def scan(text: str) -> Layout:
    """
    Split `text` into a header span and the ordered list of top-level sections.
    Indices refer to `split_lines(text)`.
    """
    return scan_lines(split_lines(text))


def extract_blocks(text: str, wanted: Iterable[str]) -> Dict[str, str]:
    """
    Return the verbatim text (key line included) of each wanted section.
    Missing sections are simply absent; a repeated key keeps its first block.
    """
    wanted_set = set(wanted)
    lines = split_lines(text)
    out: Dict[str, str] = {}
    for sec in scan_lines(lines).sections:
        if sec.name in wanted_set and sec.name not in out:
            out[sec.name] = "".join(lines[sec.start : sec.end])
    return out


def trailing_filler(lines: List[str], start: int, end: int) -> int:
    """
    Index where the run of blank / column-0 comment lines closing lines[start:end] begins.
    Those lines visually belong to whatever follows the section.
    """
    k = end
    while k > start + 1:
        s = lines[k - 1]
        if s.strip() == "" or s.startswith("#"):
            k -= 1
            continue
        break
    return k


def strip_block(text: str) -> str:
    # drop trailing blank lines, keep the body untouched
    lines = split_lines(text)
    while lines and lines[-1].strip() == "":
        lines.pop()
    return "".join(lines).rstrip("\r\n")


def ensure_newline(lines: List[str]) -> None:
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"


def splice_section(text: str, name: str, rendered: str, anchor: Optional[str] = None) -> str:
    """
    Replace section `name` with `rendered` (which must end with a newline).
    If `name` is missing, insert before the `anchor` marker, or at end of document.
    """
    lines = split_lines(text)
    layout = scan_lines(lines)
    new_lines = split_lines(rendered)
    sec = layout.find(name)
    if sec is not None:
        keep = trailing_filler(lines, sec.start, sec.end)
        tail = lines[keep : sec.end]
        if tail:
            ensure_newline(new_lines)
        elif sec.end == len(lines) and not lines[sec.end - 1].endswith("\n"):
            # original document had no trailing newline; keep it that way
            new_lines[-1] = new_lines[-1].rstrip("\r\n")
        lines[sec.start : sec.end] = new_lines + tail
        return "".join(lines)

    anchor_sec = layout.find(anchor) if anchor else None
    if anchor_sec is not None:
        lines[anchor_sec.start : anchor_sec.start] = new_lines + ["\n"]
        return "".join(lines)

    ensure_newline(lines)
    if lines and lines[-1].strip() != "":
        lines.append("\n")
    return "".join(lines + new_lines)
