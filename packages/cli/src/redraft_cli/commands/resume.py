"""resume command: reopen a review saved with `s` at the submit prompt."""

from __future__ import annotations

import click
from github import GithubException

from redraft_core.gather import write_working_copy
from redraft_core.gh.pull_request import get_repo
from redraft_core.session import SessionAction
from redraft_cli.commands.review import require_repo, require_token, run_session


@click.command("resume")
@click.argument("pr_number", type=int)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to `repo` in config.")
@click.pass_context
def resume_cmd(ctx, pr_number: int, repo: str | None):
    """Continue a saved review without fetching the PR again.

    The saved draft is removed once the review is submitted.
    """
    config = ctx.obj["config"]
    store = ctx.obj["store"]

    text = store.load(pr_number)
    if text is None:
        raise click.ClickException(f"No saved draft for PR #{pr_number}.")

    repo = require_repo(repo, config)
    token = require_token(config)
    try:
        this_repo = get_repo(repo, token=token)
    except GithubException as e:
        raise click.ClickException(str(e))

    result = run_session(this_repo, pr_number, write_working_copy(text), config, store)
    if result.action is SessionAction.SUBMIT:
        store.delete(pr_number)
