# -*- coding: utf-8 -*-
# 用法：
# 1) 初始化默认配置：
#    clash-patch init
# 2) 导入订阅（保留本地 tun/dns/rules，只取订阅里的 proxies / proxy-groups）：
#    clash-patch merge "/绝对路径/订阅.yaml" --node "🇭🇰 香港 01"
# 3) 干跑 / 看 diff（不写入）：
#    clash-patch merge sub.yaml --dry-run
#    clash-patch sanitize --diff
#
# 说明：
# - 所有改写都是幂等的；写入前默认生成 .bak.<时间戳> 备份（--no-backup 关闭）。
# - 配置目录可用 CLASH_PATCH_CONFIG_DIR 或 --config 指定。
"""
Command line front-end: reads/writes the stored config and prints what changed.
"""

from __future__ import annotations

import argparse
import difflib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import ConfigError
from .groups import parse_proxy_groups, update_proxy_groups
from .lint import lint
from .merge import merge
from .nodes import choose_node, parse_nodes
from .rules import parse_rule_line, parse_rules, render_rule, update_rules
from .sanitize import sanitize_with_notes
from .settings import MODES, default_config, load_env_file, load_settings, set_mode
from .store import ConfigStore


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    p = Path(path).expanduser()
    if not p.exists():
        raise SystemExit(f"File not found: {p}")
    return p.read_text(encoding="utf-8")


def _unified_diff(old: str, new: str, name: str) -> str:
    diff = difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=name,
        tofile=name + " (patched)",
    )
    return "".join(diff)


def _write(store: ConfigStore, original: str, text: str, args: argparse.Namespace, notes: List[str]) -> int:
    if text == original:
        print("No changes needed.")
        return 0
    if args.diff:
        print(_unified_diff(original, text, str(store)))
        return 0
    if args.dry_run:
        msg = "Dry-run: changes would be applied."
        if notes:
            msg += "\nPlanned changes:\n- " + "\n- ".join(notes)
        print(msg)
        return 0
    bak = store.save(text, backup=not args.no_backup)
    msg = f"Patched successfully: {store}"
    if notes:
        msg += "\nApplied changes:\n- " + "\n- ".join(notes)
    if bak is not None:
        msg += f"\nBackup: {bak}"
    print(msg)
    return 0


def cmd_init(store: ConfigStore, args: argparse.Namespace) -> int:
    if store.exists() and not args.force:
        print(f"Config already exists: {store} (use --force to overwrite)")
        return 1
    settings = load_settings()
    store.save(default_config(settings.tun_dns, settings.external_controller), backup=True)
    print(f"Wrote default config: {store}")
    return 0


def cmd_sanitize(store: ConfigStore, args: argparse.Namespace) -> int:
    original = store.load()
    text, notes = sanitize_with_notes(original, load_settings().tun_dns)
    return _write(store, original, text, args, notes)


def cmd_merge(store: ConfigStore, args: argparse.Namespace) -> int:
    original = store.load()
    remote = _read_input(args.remote)
    settings = load_settings()
    node = args.node or settings.selected_node
    if args.auto_node:
        node = choose_node(parse_nodes(remote), node)
    merged, notes = sanitize_with_notes(merge(original, remote, node), settings.tun_dns)
    notes.insert(0, f"merged subscription {args.remote} (PROXY -> {node or 'first remote group'})")
    return _write(store, original, merged, args, notes)


def cmd_nodes(store: ConfigStore, args: argparse.Namespace) -> int:
    nodes = parse_nodes(_read_input(args.file))
    if not nodes:
        print("No proxy nodes found.")
        return 1
    for n in nodes:
        print(f"{n.name}\t{n.type}\t{n.server}:{n.port}")
    return 0


def cmd_mode(store: ConfigStore, args: argparse.Namespace) -> int:
    original = store.load()
    return _write(store, original, set_mode(original, args.mode), args, [f"mode -> {args.mode}"])


def cmd_groups(store: ConfigStore, args: argparse.Namespace) -> int:
    original = store.load()
    groups = parse_proxy_groups(original)
    if not args.remove:
        for g in groups:
            extra = f" url={g.url} interval={g.interval}" if g.url else ""
            print(f"{g.name} [{g.type}]{extra}: {', '.join(g.proxies)}")
        return 0
    kept = [g for g in groups if g.name != args.remove]
    if len(kept) == len(groups):
        print(f"No such proxy group: {args.remove}")
        return 1
    return _write(store, original, update_proxy_groups(kept, original), args, [f"removed group {args.remove}"])


def cmd_rules(store: ConfigStore, args: argparse.Namespace) -> int:
    original = store.load()
    rules = parse_rules(original)
    notes: List[str] = []
    if args.remove is not None:
        if not 1 <= args.remove <= len(rules):
            print(f"Rule index out of range: {args.remove} (1..{len(rules)})")
            return 1
        removed = rules.pop(args.remove - 1)
        notes.append(f"removed rule {render_rule(removed).strip()}")
    if args.add:
        rec = parse_rule_line(f"- {args.add}")
        if rec is None:
            raise ValueError(f"Invalid rule: {args.add!r}")
        at = len(rules) if args.at is None else max(0, args.at - 1)
        rules.insert(at, rec)
        notes.append(f"added rule {render_rule(rec).strip()} at {min(at, len(rules) - 1) + 1}")
    if not notes:
        for i, r in enumerate(rules, 1):
            print(f"{i:>4}  {render_rule(r).strip()[2:]}")
        return 0
    return _write(store, original, update_rules(rules, original), args, notes)


def cmd_lint(store: ConfigStore, args: argparse.Namespace) -> int:
    issues = lint(store.load())
    for issue in issues:
        print(f"{store}:{issue.line}: {issue.message}")
    if not issues:
        print("No issues found.")
    return 1 if issues else 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="clash-patch", description="Line-level editing of Clash/mihomo configs")
    ap.add_argument("--config", type=str, default=None, help="Config directory (default: $CLASH_PATCH_CONFIG_DIR)")
    ap.add_argument("--env-file", type=str, default=".env", help="Load env vars from file (default: .env).")
    ap.add_argument("--no-env-file", action="store_true", help="Do not load .env file automatically.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    write_opts = argparse.ArgumentParser(add_help=False)
    write_opts.add_argument("--dry-run", action="store_true", help="Do not write file; only report")
    write_opts.add_argument("--diff", action="store_true", help="Print unified diff (no file write)")
    write_opts.add_argument("--no-backup", action="store_true", help="Do not write .bak backup")

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Write the default config")
    p.add_argument("--force", action="store_true", help="Overwrite an existing config")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("sanitize", parents=[write_opts], help="Fix settings that break the tunnel runtime")
    p.set_defaults(func=cmd_sanitize)

    p = sub.add_parser("merge", parents=[write_opts], help="Import proxies/groups from a subscription file")
    p.add_argument("remote", type=str, help="Subscription YAML path ('-' for stdin)")
    p.add_argument("--node", type=str, default=None, help="Node for the PROXY selector (default: $CLASH_PATCH_SELECTED_NODE)")
    p.add_argument("--auto-node", action="store_true", help="Fall back to the subscription's first node")
    p.set_defaults(func=cmd_merge)

    p = sub.add_parser("nodes", help="List the nodes offered by a subscription file")
    p.add_argument("file", type=str, help="Subscription YAML path ('-' for stdin)")
    p.set_defaults(func=cmd_nodes)

    p = sub.add_parser("mode", parents=[write_opts], help="Switch routing mode")
    p.add_argument("mode", choices=MODES)
    p.set_defaults(func=cmd_mode)

    p = sub.add_parser("groups", parents=[write_opts], help="List or remove proxy groups")
    p.add_argument("--remove", type=str, default=None, metavar="NAME", help="Remove the named group")
    p.set_defaults(func=cmd_groups)

    p = sub.add_parser("rules", parents=[write_opts], help="List, add or remove rules")
    p.add_argument("--add", type=str, default=None, metavar="RULE", help="e.g. DOMAIN-SUFFIX,example.com,PROXY")
    p.add_argument("--at", type=int, default=None, metavar="N", help="1-based position for --add (default: end)")
    p.add_argument("--remove", type=int, default=None, metavar="N", help="Remove the N-th rule (1-based)")
    p.set_defaults(func=cmd_rules)

    p = sub.add_parser("lint", help="Report suspicious lines")
    p.set_defaults(func=cmd_lint)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.no_env_file and args.env_file:
        load_env_file(args.env_file)

    config_dir = args.config or str(load_settings().config_dir)
    store = ConfigStore(config_dir)
    try:
        return args.func(store, args)
    except (ConfigError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
