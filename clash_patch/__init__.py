# -*- coding: utf-8 -*-
"""
Line-oriented editing of Clash/mihomo configuration documents.

All document operations take text and return new text; only `store.ConfigStore`
touches the filesystem.
"""

from .errors import ConfigDirectoryUnavailable, ConfigError, ConfigNotFound
from .groups import ProxyGroupRecord, parse_proxy_groups, update_proxy_groups
from .lint import LintIssue, lint
from .merge import merge
from .nodes import ProxyNode, choose_node, parse_nodes
from .rules import RuleRecord, parse_rules, update_rules
from .reload import ReloadResult, download_geodata, reload_subscriptions
from .sanitize import sanitize, sanitize_with_notes
from .sections import Layout, Section, Span, extract_blocks, scan
from .settings import default_config, set_mode
from .store import ConfigStore

__version__ = "0.1.0"

__all__ = [
    "ConfigDirectoryUnavailable",
    "ConfigError",
    "ConfigNotFound",
    "ConfigStore",
    "Layout",
    "LintIssue",
    "ProxyGroupRecord",
    "ProxyNode",
    "ReloadResult",
    "RuleRecord",
    "Section",
    "Span",
    "choose_node",
    "default_config",
    "download_geodata",
    "extract_blocks",
    "lint",
    "merge",
    "parse_nodes",
    "parse_proxy_groups",
    "parse_rules",
    "reload_subscriptions",
    "sanitize",
    "sanitize_with_notes",
    "scan",
    "set_mode",
    "update_proxy_groups",
    "update_rules",
]
