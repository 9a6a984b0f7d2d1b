# -*- coding: utf-8 -*-
"""
Fetch orchestration around the document core. The transport itself is injected:
`fetch(url) -> str` for subscriptions, `fetch_bytes(url) -> bytes` for geo data.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from .settings import GEO_FILES

logger = logging.getLogger(__name__)


class ReloadResult(NamedTuple):
    succeeded: List[str]
    failed: List[Tuple[str, str]]
    contents: Dict[str, str]

    @property
    def message(self) -> str:
        parts: List[str] = []
        if self.succeeded:
            parts.append("✓ " + ", ".join(self.succeeded))
        if self.failed:
            parts.append("✗ " + "\n".join(f"{name}: {err}" for name, err in self.failed))
        return "\n".join(parts)


def reload_subscriptions(
    sources: Mapping[str, str],
    fetch: Callable[[str], str],
    max_workers: int = 4,
) -> ReloadResult:
    """
    Fetch every subscription in parallel. One failing source never blocks the others;
    the report keeps the order of `sources`.
    """
    if not sources:
        return ReloadResult([], [], {})

    outcomes: Dict[str, Union[str, Exception]] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(sources)))) as pool:
        futures = {pool.submit(fetch, url): name for name, url in sources.items()}
        for fut in as_completed(futures):
            name = futures[fut]
            try:
                outcomes[name] = fut.result()
            except Exception as e:
                logger.warning("reload: %s failed: %s", name, e)
                outcomes[name] = e

    succeeded: List[str] = []
    failed: List[Tuple[str, str]] = []
    contents: Dict[str, str] = {}
    for name in sources:
        out = outcomes[name]
        if isinstance(out, Exception):
            failed.append((name, str(out) or type(out).__name__))
        else:
            succeeded.append(name)
            contents[name] = out
    return ReloadResult(succeeded, failed, contents)


def download_geodata(
    directory: Union[str, Path],
    fetch_bytes: Callable[[str], bytes],
    files: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Download each missing geo file once, one after another. Files already on disk
    are skipped; failures are logged and otherwise ignored. Returns the names written.
    """
    target = Path(directory).expanduser()
    written: List[str] = []
    for name, url in (GEO_FILES if files is None else files).items():
        dest = target / name
        if dest.exists():
            continue
        try:
            data = fetch_bytes(url)
            target.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        except Exception as e:
            logger.warning("geodata: failed to download %s: %s", name, e)
            continue
        logger.info("geodata: downloaded %s (%d bytes)", name, len(data))
        written.append(name)
    return written
