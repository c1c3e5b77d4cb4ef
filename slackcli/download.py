"""
Batch file download.

Fetches a conversation's file listing and writes every usable file to a
local directory. Colliding names get a numeric suffix (``name_1.ext``,
``name_2.ext``, ...); the final path is reserved before the transfer
starts. One failed download never aborts the batch.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple

from .utils import SlackApiError

logger = logging.getLogger(__name__)


@dataclass
class DownloadReport:
    """Per-file outcomes. The three buckets are disjoint."""

    # (file, path, bytes written)
    downloaded: List[Tuple[dict, Path, int]] = field(default_factory=list)
    # (file, error message)
    failed: List[Tuple[dict, str]] = field(default_factory=list)
    # (file, reason)
    skipped: List[Tuple[dict, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.failed) + len(self.skipped)


def download_url_for(f: dict) -> Optional[str]:
    return f.get("url_private_download") or f.get("url_private")


def file_name_for(f: dict) -> str:
    """Declared name (basename only), or ``<id>.<filetype>``."""
    name = Path(f.get("name") or "").name
    if name:
        return name
    return f"{f.get('id')}.{f.get('filetype') or 'bin'}"


def reserve_path(output_dir: Path, file_name: str, claimed: Set[Path]) -> Path:
    """
    First free path for ``file_name`` in ``output_dir``.

    A path is taken if it exists on disk or was already claimed earlier
    in this batch. The returned path is added to ``claimed``.
    """
    base = Path(file_name)
    candidate = output_dir / file_name
    counter = 1
    while candidate.exists() or candidate in claimed:
        candidate = output_dir / f"{base.stem}_{counter}{base.suffix}"
        counter += 1
    claimed.add(candidate)
    return candidate


def write_file(path: Path, content: bytes):
    """Write via a .part sibling so an interrupted transfer never looks complete."""
    partial = path.with_name(path.name + ".part")
    try:
        partial.write_bytes(content)
        partial.replace(path)
    except OSError:
        partial.unlink(missing_ok=True)
        raise


def download_files(
    client,
    files: List[dict],
    output_dir: Path,
    on_progress: Optional[Callable[[str, dict, object], None]] = None,
) -> DownloadReport:
    """
    Download ``files`` sequentially into ``output_dir``.

    ``on_progress(outcome, file, detail)`` is called once per file with
    outcome "downloaded" (detail: (path, size)), "failed" (detail: error)
    or "skipped" (detail: reason).
    """
    report = DownloadReport()
    claimed: Set[Path] = set()

    def notify(outcome, f, detail):
        if on_progress:
            on_progress(outcome, f, detail)

    for f in files:
        url = download_url_for(f)
        if not url:
            report.skipped.append((f, "no download URL available"))
            notify("skipped", f, "no download URL available")
            continue
        if f.get("mode") == "tombstone":
            report.skipped.append((f, "file was deleted"))
            notify("skipped", f, "file was deleted")
            continue

        path = reserve_path(output_dir, file_name_for(f), claimed)
        try:
            content = client.fetch_file_binary(url)
            write_file(path, content)
        except (SlackApiError, OSError) as e:
            logger.warning("Failed to download %s: %s", f.get("id"), e)
            report.failed.append((f, str(e)))
            notify("failed", f, str(e))
            continue

        report.downloaded.append((f, path, len(content)))
        notify("downloaded", f, (path, len(content)))

    return report


def download_all(
    client,
    channel_id: str,
    output_dir,
    types: Optional[str] = None,
    count: int = 100,
    on_progress: Optional[Callable[[str, dict, object], None]] = None,
) -> DownloadReport:
    """
    Download every file shared in a conversation.

    A failure fetching the listing propagates; per-file failures are
    recorded in the report.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    listing = client.list_files(channel=channel_id, types=types, count=count)
    files = listing.get("files") or []
    logger.info("Found %d file(s) in %s", len(files), channel_id)

    return download_files(client, files, output_dir, on_progress=on_progress)
