"""Tests for clash_patch.nodes."""

from clash_patch.nodes import ProxyNode, choose_node, parse_nodes

SUBSCRIPTION = (
    "proxies:\n"
    "  - {name: \"hk, 01\", type: ss, server: 1.2.3.4, port: 8388, cipher: aes-256-gcm}\n"
    "  - name: jp-01\n"
    "    type: vmess\n"
    "    server: jp.example.com\n"
    "    port: 443\n"
    "    ws-opts:\n"
    "      path: /ws\n"
    "      headers:\n"
    "        Host: cdn.example.com\n"
    "  -\n"
    "    name: 'us-01'\n"
    "    type: trojan\n"
    "    server: us.example.com\n"
    "    port: 443 # tls\n"
    "  - name: broken\n"
    "    type: ss\n"
    "    port: not-a-number\n"
    "proxy-groups:\n"
    "  - name: PROXY\n"
    "    type: select\n"
    "    server: nope\n"
    "    port: 1\n"
)


class TestParseNodes:
    def test_all_shapes(self) -> None:
        assert parse_nodes(SUBSCRIPTION) == [
            ProxyNode("hk, 01", "ss", "1.2.3.4", 8388),
            ProxyNode("jp-01", "vmess", "jp.example.com", 443),
            ProxyNode("us-01", "trojan", "us.example.com", 443),
        ]

    def test_no_proxies(self) -> None:
        assert parse_nodes("mode: rule\n") == []
        assert parse_nodes("proxies: []\n") == []


class TestChooseNode:
    def test_keeps_current(self) -> None:
        nodes = parse_nodes(SUBSCRIPTION)
        assert choose_node(nodes, "us-01") == "us-01"

    def test_falls_back_to_first(self) -> None:
        nodes = parse_nodes(SUBSCRIPTION)
        assert choose_node(nodes, "gone") == "hk, 01"
        assert choose_node(nodes, None) == "hk, 01"

    def test_empty(self) -> None:
        assert choose_node([], "x") is None
