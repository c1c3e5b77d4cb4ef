"""File commands: list, read, download, download-all."""

import typer
from pathlib import Path
from typing import Optional

from ..download import download_all, write_file
from ..utils import (
    DEFAULT_DOWNLOAD_DIR,
    LOGIN_HINT,
    SlackCliError,
    fail,
    file_to_json,
    format_file_list,
    format_file_size,
    get_client,
    info,
    lookup_users,
    print_json,
    success,
    user_summary,
    warning,
)

app = typer.Typer(help="Download and read files")

WORKSPACE_HELP = "Workspace to use (id or name)"
TYPES_HELP = "File types (comma-separated: images, videos, pdfs, docs, spaces, snippets, gdocs, zips)"


@app.command("list")
def list_files(
    channel: Optional[str] = typer.Option(None, "--channel", help="Channel ID to filter files by"),
    user: Optional[str] = typer.Option(None, "--user", help="User ID to filter files by"),
    types: Optional[str] = typer.Option(None, "--types", help=TYPES_HELP),
    count: int = typer.Option(100, "--count", help="Number of files to return"),
    page: int = typer.Option(1, "--page", help="Page number for pagination"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List files in a conversation or workspace."""
    try:
        with get_client(workspace) as client:
            listing = client.list_files(channel=channel, user=user, types=types, count=count, page=page)
            files = listing.get("files") or []
            users = lookup_users(client, (f.get("user") for f in files))
    except SlackCliError as e:
        e.hint = e.hint or LOGIN_HINT
        fail(e)

    paging = listing.get("paging")
    if as_json:
        print_json(
            {
                "file_count": len(files),
                "paging": paging,
                "files": [file_to_json(f, users) for f in files],
                "users": [user_summary(u) for u in users.values()],
            }
        )
        return

    print(format_file_list(files, users))
    if paging:
        info(f"Page {paging.get('page')} of {paging.get('pages')} ({paging.get('total')} total files)")


@app.command("read")
def read_file(
    url: str = typer.Option(..., "--url", help="File URL (url_private or url_private_download)"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Print file content as text (VTT, snippets, text files)."""
    try:
        with get_client(workspace) as client:
            content = client.fetch_file_text(url)
    except SlackCliError as e:
        fail(e)

    print(content)


@app.command("download")
def download(
    url: str = typer.Option(..., "--url", help="File URL (url_private or url_private_download)"),
    output: Path = typer.Option(..., "--output", help="Output file path"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Download a single file to disk."""
    try:
        with get_client(workspace) as client:
            content = client.fetch_file_binary(url)
        write_file(output, content)
    except (SlackCliError, OSError) as e:
        fail(e)

    success(f"Saved to: {output}")
    info(f"Size: {len(content)} bytes")


@app.command("download-all")
def download_all_files(
    channel: str = typer.Option(..., "--channel", help="Channel ID to download files from"),
    output: Path = typer.Option(Path(DEFAULT_DOWNLOAD_DIR), "--output", help="Output directory"),
    types: Optional[str] = typer.Option(None, "--types", help=TYPES_HELP),
    count: int = typer.Option(100, "--count", help="Maximum number of files to download"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Batch download files from a conversation.

    Name collisions get a numeric suffix (report_1.pdf, report_2.pdf, ...).
    Deleted files and files without a download URL are skipped.

    Examples:

        slackcli files download-all --channel C0A7RJWRZPT --output ./exports --types pdfs
    """

    def progress(outcome, f, detail):
        name = f.get("name") or f.get("id")
        if outcome == "downloaded":
            path, size = detail
            success(f"Downloaded: {path.name} ({format_file_size(size)})")
        elif outcome == "failed":
            print(f"❌ Failed to download {name}: {detail}")
        elif f.get("mode") != "tombstone":
            warning(f"Skipping {name}: {detail}")

    try:
        with get_client(workspace) as client:
            report = download_all(
                client, channel, output, types=types, count=count, on_progress=progress
            )
    except (SlackCliError, OSError) as e:
        fail(e)

    if report.total == 0:
        warning("No files found in this channel")
        return

    print()
    success(f"Downloaded {len(report.downloaded)} files to {output}")
    if report.failed:
        warning(f"{len(report.failed)} files failed to download")
    if report.skipped:
        info(f"{len(report.skipped)} files skipped (no URL or deleted)")
