import logging

import typer

from . import __version__
from .commands import auth, conversations, drafts, files, messages

app = typer.Typer(help="Slack CLI for the Slack Web API", no_args_is_help=True)

app.add_typer(auth.app, name="auth")
app.add_typer(messages.app, name="messages")
app.add_typer(conversations.app, name="conversations")
app.add_typer(files.app, name="files")
app.add_typer(drafts.app, name="drafts")


def _version(value: bool):
    if value:
        print(f"slackcli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API calls and progress to stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version, is_eager=True, help="Show the version and exit"
    ),
):
    """Send and schedule messages, browse conversations, download files, manage drafts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)


if __name__ == "__main__":
    app()
