"""CLI entry point for redraft.

Commands:
  review   fetch a pull request, edit the review in $EDITOR, submit it
  resume   reopen a review saved with `s` at the submit prompt
  drafts   list saved reviews
  prs      open pull requests involving a user, split into mine/theirs
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from redraft_cli.commands.drafts import drafts_cmd
from redraft_cli.commands.prs import prs_cmd
from redraft_cli.commands.resume import resume_cmd
from redraft_cli.commands.review import review_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured draft store from .redraft.yml settings.

      drafts: local → LocalDraftStore in draft_dir (default)
      drafts: none  → NoOpStore (saving disabled)
    """
    from redraft_store.noop import NoOpStore

    store_type = config.get("drafts", "local")

    if store_type == "local":
        from redraft_store.local import LocalDraftStore

        return LocalDraftStore(directory=config.get("draft_dir") or ".")

    if store_type != "none":
        console.print(f"[yellow]Unknown drafts setting {store_type!r}. Draft saving is disabled.[/yellow]")
    return NoOpStore()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # PyGithub and urllib3 are chatty at DEBUG.
    logging.getLogger("github").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("redraft"),
    prog_name="redraft",
)
@click.option(
    "--config",
    "config_path",
    default=".redraft.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REDRAFT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log timings and git/editor invocations.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Review GitHub pull requests from your text editor."""
    from redraft_core.config import load_config
    from redraft_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token(config.get("token_file"))
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(review_cmd)
main.add_command(resume_cmd)
main.add_command(drafts_cmd)
main.add_command(prs_cmd)
