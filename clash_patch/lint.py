# -*- coding: utf-8 -*-
"""
Cheap line checks for hand-edited configs. These are hints for an editor,
not a YAML validator: nothing here stops a document from being saved.
"""

from __future__ import annotations

from typing import List, NamedTuple

from .sections import split_lines

MAX_INDENT_JUMP = 8


class LintIssue(NamedTuple):
    line: int  # 1-based
    message: str


def _missing_space_after_colon(s: str) -> bool:
    if s.startswith("-") or s.startswith('"') or s.startswith("'"):
        return False
    if s.startswith("http") or "://" in s:
        return False
    i = s.find(":")
    if i < 0 or i + 1 >= len(s):
        return False
    return s[i + 1] not in " \t"


def lint(text: str) -> List[LintIssue]:
    issues: List[LintIssue] = []
    indent_stack = [0]
    for idx, raw in enumerate(split_lines(text)):
        line = raw.rstrip("\r\n")
        lineno = idx + 1
        s = line.strip()
        if not s or s.startswith("#"):
            continue

        if "\t" in line:
            issues.append(LintIssue(lineno, "Tabs are not allowed in YAML, use spaces"))

        if _missing_space_after_colon(s):
            issues.append(LintIssue(lineno, "Missing space after colon"))

        indent = len(line) - len(line.lstrip(" "))
        if indent > indent_stack[-1] + MAX_INDENT_JUMP:
            issues.append(LintIssue(lineno, "Unexpected indentation increase"))
        if indent > indent_stack[-1]:
            indent_stack.append(indent)
        else:
            while indent_stack[-1] > indent:
                indent_stack.pop()

        if s.count('"') % 2 and '\\"' not in s:
            issues.append(LintIssue(lineno, "Unclosed double quote"))
        if s.count("'") % 2:
            issues.append(LintIssue(lineno, "Unclosed single quote"))
    return issues
