"""prs command: open pull requests involving a user, split into mine and theirs."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from redraft_core.gh.pull_request import get_client, search_involving
from redraft_cli.commands.review import require_repo, require_token

console = Console()


def _table(title: str, issues) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=8)
    table.add_column("Author", width=20)
    table.add_column("Title")
    for issue in issues:
        login = issue.user.login if issue.user else ""
        table.add_row(f"#{issue.number}", escape(login), escape(issue.title or ""))
    return table


@click.command("prs")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to `repo` in config.")
@click.option("--user", default=None, help="GitHub login. Defaults to the token's owner.")
@click.pass_context
def prs_cmd(ctx, repo: str | None, user: str | None):
    """List open PRs updated in the last month that involve a user.

    "Mine" are PRs the user opened; "Theirs" are everyone else's PRs the
    user is involved in, i.e. ones waiting on a review.
    """
    config = ctx.obj["config"]
    repo = require_repo(repo, config)
    gh = get_client(require_token(config))

    try:
        user = user or gh.get_user().login
        mine, theirs = search_involving(gh, repo, user)
    except GithubException as e:
        raise click.ClickException(str(e))

    if not mine and not theirs:
        console.print(f"[yellow]No open pull requests involving {escape(user)}.[/yellow]")
        return
    console.print(_table("Mine", mine))
    console.print(_table("Theirs", theirs))
