# -*- coding: utf-8 -*-
# 配置来源（优先级从高到低）：
#   1) 环境变量 CLASH_PATCH_*
#   2) .env 文件（默认读取当前目录下的 .env，可用 --env-file 指定）
#   3) 本文件里的默认常量
"""
Runtime constants, environment overrides, the baseline config and mode switching.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, NamedTuple, Optional, Tuple

from .sections import scan_lines, split_lines
from .yamlish import unquote

# ====== tunnel / engine constants ======
TUN_ADDRESS = "198.18.0.1"
TUN_DNS = "198.18.0.2"
EXTERNAL_CONTROLLER = "127.0.0.1:9090"
CONFIG_FILE_NAME = "config.yaml"
DEFAULT_CONFIG_DIR = "~/.config/clash-patch"

MODES = ("rule", "global", "direct")

# geo data the engine would otherwise try to download at startup
GEO_FILES: Dict[str, str] = {
    "geoip.metadb": "https://github.com/MetaCubeX/meta-rules-dat/releases/download/latest/geoip.metadb",
    "geosite.dat": "https://github.com/MetaCubeX/meta-rules-dat/releases/download/latest/geosite.dat",
}

CONFIG_DIR_ENV = "CLASH_PATCH_CONFIG_DIR"
SELECTED_NODE_ENV = "CLASH_PATCH_SELECTED_NODE"
TUN_DNS_ENV = "CLASH_PATCH_TUN_DNS"
EXTERNAL_CONTROLLER_ENV = "CLASH_PATCH_EXTERNAL_CONTROLLER"


class Settings(NamedTuple):
    config_dir: Path
    selected_node: Optional[str]
    tun_dns: str
    external_controller: str


def _env_pair(line: str) -> Optional[Tuple[str, str]]:
    s = line.strip()
    if s.startswith("export "):
        s = s[len("export ") :]
    key, sep, value = s.partition("=")
    key = key.strip()
    if not sep or not key or key.startswith("#"):
        return None
    return key, unquote(value.strip())


def read_env_file(env_path: str) -> Dict[str, str]:
    """`KEY=VALUE` pairs from a dotenv-style file; a missing file reads as empty."""
    p = Path(env_path).expanduser()
    if not p.is_file():
        return {}
    pairs = (_env_pair(ln) for ln in p.read_text(encoding="utf-8").splitlines())
    return dict(pair for pair in pairs if pair is not None)


def load_env_file(env_path: str, *, override: bool = True) -> Dict[str, str]:
    """Apply `read_env_file` to os.environ; returns the pairs that were applied."""
    applied = {
        key: value
        for key, value in read_env_file(env_path).items()
        if override or key not in os.environ
    }
    os.environ.update(applied)
    return applied


def load_settings(environ: Optional[Dict[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    config_dir = env.get(CONFIG_DIR_ENV, "").strip() or DEFAULT_CONFIG_DIR
    node = env.get(SELECTED_NODE_ENV, "").strip() or None
    return Settings(
        config_dir=Path(os.path.expanduser(config_dir)),
        selected_node=node,
        tun_dns=env.get(TUN_DNS_ENV, "").strip() or TUN_DNS,
        external_controller=env.get(EXTERNAL_CONTROLLER_ENV, "").strip() or EXTERNAL_CONTROLLER,
    )


def default_config(tun_dns: str = TUN_DNS, external_controller: str = EXTERNAL_CONTROLLER) -> str:
    return (
        "mixed-port: 7890\n"
        "mode: rule\n"
        "log-level: info\n"
        "allow-lan: false\n"
        f"external-controller: {external_controller}\n"
        "\n"
        "tun:\n"
        "  enable: true\n"
        "  stack: system\n"
        "  dns-hijack:\n"
        f"    - {tun_dns}:53\n"
        "  auto-route: false\n"
        "  auto-detect-interface: false\n"
        "\n"
        "geo-auto-update: false\n"
        "\n"
        "dns:\n"
        "  enable: true\n"
        f"  listen: {tun_dns}:53\n"
        "  enhanced-mode: fake-ip\n"
        "  fake-ip-range: 198.18.0.1/16\n"
        "  nameserver:\n"
        "    - https://dns.alidns.com/dns-query\n"
        "    - https://doh.pub/dns-query\n"
        "  fallback:\n"
        "    - https://1.1.1.1/dns-query\n"
        "    - https://8.8.8.8/dns-query\n"
        "  fallback-filter:\n"
        "    geoip: false\n"
        "\n"
        "proxies: []\n"
        "\n"
        "proxy-groups:\n"
        "  - name: PROXY\n"
        "    type: select\n"
        "    proxies: []\n"
        "\n"
        "rules:\n"
        "  - MATCH,DIRECT\n"
    )


def set_mode(text: str, mode: str) -> str:
    """
    Point the top-level `mode:` at `mode`, inserting the key at the top if missing.
    """
    mode = (mode or "").strip().lower()
    if mode not in MODES:
        raise ValueError(f"Invalid mode {mode!r}. Use: {' | '.join(MODES)}")
    lines = split_lines(text)
    sec = scan_lines(lines).find("mode")
    desired = f"mode: {mode}"
    if sec is None:
        return "".join([desired + "\n"] + lines)
    old = lines[sec.start]
    if old.strip() == desired:
        return text
    ending = old[len(old.rstrip("\r\n")) :]
    lines[sec.start] = desired + ending
    return "".join(lines)
