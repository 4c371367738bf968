import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "repo": None,  # owner/name used when --repo is omitted
    "editor": None,  # None = $VISUAL, then $EDITOR, then vi
    "diff_mode": "commits",  # "commits" = one diff per commit, "combined" = base...head
    "wrap_width": 70,
    "drafts": "local",  # "local" = <pr>.redraft files in draft_dir, "none" = saving disabled
    "draft_dir": ".",
    "remote_url": None,  # None = https://github.com/<repo>
    "token_file": None,  # None = ~/.github-issue-token
}

DIFF_MODES = ("commits", "combined")


def load_config(config_path: str = ".redraft.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .redraft.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if config["diff_mode"] not in DIFF_MODES:
        raise ValueError(f"Unknown diff_mode: {config['diff_mode']!r}. Choose 'commits' or 'combined'.")

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
