"""review command: fetch a pull request, edit the review in $EDITOR, submit it."""

from __future__ import annotations

from pathlib import Path

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape

from redraft_core.editor import resolve_editor
from redraft_core.errors import RedraftError
from redraft_core.gather import build_template, gather_review_data, write_working_copy
from redraft_core.gh.pull_request import get_pull, get_pull_requests, get_repo, submit_review
from redraft_core.session import ReviewSession, SessionAction, SessionResult
from redraft_store.noop import NoOpStore

console = Console()


def require_repo(repo: str | None, config: dict) -> str:
    repo = repo or config.get("repo")
    if not repo:
        raise click.UsageError("No repository given. Pass --repo owner/name or set `repo:` in .redraft.yml.")
    if repo.count("/") != 1:
        raise click.UsageError(f"Invalid repository {repo!r}: must be owner/name, like golang/go.")
    return repo


def require_token(config: dict) -> str:
    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN, write one to ~/.github-issue-token "
            "(mode 0600), or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    return token


def _draft_saver(store, pr_number: int):
    if isinstance(store, NoOpStore):
        return None

    def save(working_path: str) -> str:
        return store.save(pr_number, Path(working_path).read_text(encoding="utf-8")).path

    return save


def run_session(repo_obj, pr_number: int, path: str, config: dict, store) -> SessionResult:
    """Drive the edit/decide loop on ``path`` and submit the review if asked to.

    If submission fails the edited document is saved as a draft so the
    reviewer's comments survive.
    """
    session = ReviewSession(
        path,
        editor=resolve_editor(config),
        save_draft=_draft_saver(store, pr_number),
        console=console,
    )
    result = session.run()

    if result.action is SessionAction.ABORTED:
        console.print("[yellow]Review abandoned.[/yellow]")
        return result
    if result.action is not SessionAction.SUBMIT:
        return result

    request = result.request
    try:
        pr = get_pull(repo_obj, pr_number)
        summary = submit_review(repo_obj, pr, request)
    except (GithubException, RedraftError) as e:
        message = f"Could not submit review: {e}"
        if result.text is not None and not isinstance(store, NoOpStore):
            record = store.save(pr_number, result.text)
            message += f"\nYour review was saved to {record.path}; resume it with `redraft resume {pr_number}`."
        raise click.ClickException(message)

    if not summary.posted:
        console.print("[yellow]Nothing to submit.[/yellow]")
        return result
    event = request.event or "PENDING"
    sent = summary.comments + summary.replies
    console.print(f"[green]Review submitted: {event}. {sent} comment(s).[/green]")
    return result


@click.command("review")
@click.argument("pr_number", type=int, required=False)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to `repo` in config.")
@click.option(
    "--combined",
    is_flag=True,
    help="Review base...head as a single diff instead of commit by commit.",
)
@click.option("--width", type=int, default=None, help="Wrap existing comments at this column. Overrides config file.")
@click.pass_context
def review_cmd(ctx, pr_number: int | None, repo: str | None, combined: bool, width: int | None):
    """Review a pull request in your editor.

    Writes the PR, its discussion and its diff (with existing inline
    comments) to a temporary file and opens $VISUAL / $EDITOR on it. Type
    comments on new lines under the diff lines they refer to, then choose
    how to submit.
    """
    config = dict(ctx.obj["config"])
    store = ctx.obj["store"]
    if combined:
        config["diff_mode"] = "combined"
    if width is not None:
        config["wrap_width"] = width

    repo = require_repo(repo, config)
    token = require_token(config)

    try:
        this_repo = get_repo(repo, token=token)

        if pr_number is None:
            prs = list(get_pull_requests(this_repo))
            if not prs:
                console.print("[yellow]No open pull requests found.[/yellow]")
                return
            console.print("\nOpen pull requests:")
            for pr in prs:
                console.print(f"  [bold]#{pr.number}[/bold]  {escape(pr.title or '')}")
            pr_number = click.prompt("\nEnter the pull request number", type=int)

        data = gather_review_data(this_repo, pr_number, config)
    except (RedraftError, GithubException) as e:
        raise click.ClickException(str(e))

    path = write_working_copy(build_template(data, width=config.get("wrap_width", 70)))
    run_session(this_repo, pr_number, path, config, store)
