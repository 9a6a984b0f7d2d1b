"""Tests for clash_patch.lint."""

from clash_patch.lint import LintIssue, lint
from clash_patch.settings import default_config


class TestLint:
    def test_default_config_is_clean(self) -> None:
        assert lint(default_config()) == []

    def test_reports_line_numbers(self) -> None:
        text = (
            "mode: rule\n"
            "port:7890\n"
            "dns:\n"
            "\tenable: true\n"
            "  nameserver:\n"
            "               - 1.1.1.1\n"
            "  name: \"oops\n"
            "# it's fine in a comment\n"
        )
        assert lint(text) == [
            LintIssue(2, "Missing space after colon"),
            LintIssue(4, "Tabs are not allowed in YAML, use spaces"),
            LintIssue(6, "Unexpected indentation increase"),
            LintIssue(7, "Unclosed double quote"),
        ]

    def test_urls_are_not_flagged(self) -> None:
        text = "external-controller: 127.0.0.1:9090\n  - https://dns.alidns.com/dns-query\n"
        assert lint(text) == []
