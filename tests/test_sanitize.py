"""Tests for clash_patch.sanitize."""

import pytest

from clash_patch.sanitize import sanitize, sanitize_with_notes
from clash_patch.settings import default_config

SUBSCRIPTION_STYLE = (
    "mixed-port: 7890\n"
    "geo-auto-update: true\n"
    "dns:\n"
    "  enable: true\n"
    "  listen: 0.0.0.0:53\n"
    "  fallback:\n"
    "    - https://dns.google/dns-query\n"
    "  fallback-filter:\n"
    "    geoip: true\n"
    "rules:\n"
    "  - MATCH,DIRECT\n"
)


class TestSubstitutions:
    def test_flips_and_rewrites(self) -> None:
        out = sanitize(SUBSCRIPTION_STYLE)
        assert "    geoip: false\n" in out
        assert "geo-auto-update: false\n" in out
        assert "  listen: 198.18.0.2:53\n" in out
        assert "    - https://8.8.8.8/dns-query\n" in out
        assert "true" not in out.replace("enable: true", "")

    def test_only_exact_lines_match(self) -> None:
        text = "geo-auto-update: false\ndns:\n  fallback-filter:\n    geoip: true # keep\n    geoip-code: CN\n"
        assert sanitize(text) == text

    def test_unmatched_listen_is_left_alone(self) -> None:
        text = "mode: rule\ndns:\n  listen: x\n"
        # `dns` anchor exists, so only the geo-auto-update insertion applies
        out = sanitize(text)
        assert "  listen: x\n" in out
        assert "198.18.0.2" not in out

    def test_no_spurious_change(self) -> None:
        text = "mode: rule\ntun:\n  listen: x\n"
        assert sanitize(text) == text

    def test_line_endings_preserved(self) -> None:
        text = "dns:\r\n  geoip: true\r\ngeo-auto-update: false\r\n"
        assert sanitize(text) == "dns:\r\n  geoip: false\r\ngeo-auto-update: false\r\n"


class TestTunDns:
    def test_listen_follows_configured_address(self) -> None:
        out = sanitize(SUBSCRIPTION_STYLE, tun_dns="10.0.0.2")
        assert "  listen: 10.0.0.2:53\n" in out
        assert "198.18.0.2" not in out

    def test_custom_default_config_stays_clean(self) -> None:
        text = default_config(tun_dns="10.0.0.2")
        assert sanitize(text, tun_dns="10.0.0.2") == text

    @pytest.mark.parametrize("address", ["10.0.0.2", "0.0.0.0", "127.0.0.1"])
    def test_twice_equals_once(self, address: str) -> None:
        once = sanitize(SUBSCRIPTION_STYLE, tun_dns=address)
        assert sanitize_with_notes(once, tun_dns=address) == (once, [])


class TestInsertion:
    def test_inserted_before_dns(self) -> None:
        text = "mode: rule\ndns:\n  enable: true\n"
        assert sanitize(text) == "mode: rule\ngeo-auto-update: false\n\ndns:\n  enable: true\n"

    def test_skipped_when_key_present_anywhere(self) -> None:
        text = "mode: rule\ndns:\n  enable: true\ngeo-auto-update: false\n"
        assert sanitize(text) == text

    def test_skipped_without_anchor(self) -> None:
        text = "mode: rule\nrules:\n  - MATCH,DIRECT\n"
        assert sanitize(text) == text

    def test_indented_dns_is_not_an_anchor(self) -> None:
        text = "profile:\n  dns:\n    x: 1\n"
        assert sanitize(text) == text


class TestIdempotence:
    @pytest.mark.parametrize(
        "text",
        [
            SUBSCRIPTION_STYLE,
            default_config(),
            "",
            "dns:\n",
            "# only a comment\n",
            "mode: rule\ndns:\n  listen: x\n",
        ],
    )
    def test_twice_equals_once(self, text: str) -> None:
        once = sanitize(text)
        assert sanitize(once) == once

    def test_default_config_is_already_clean(self) -> None:
        assert sanitize(default_config()) == default_config()

    def test_notes_report_changes(self) -> None:
        _, notes = sanitize_with_notes(SUBSCRIPTION_STYLE)
        assert "disabled geo-auto-update" in notes
        _, notes = sanitize_with_notes(sanitize(SUBSCRIPTION_STYLE))
        assert notes == []
