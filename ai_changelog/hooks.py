"""
Install a git pre-push hook that regenerates the changelog.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Optional

from . import git_adapter
from .config import AIConfig
from .errors import GitError

LOG = logging.getLogger(__name__)

HOOK_TEMPLATE = """#!/bin/sh
# ai-changelog pre-push hook
if ! command -v ai-changelog >/dev/null 2>&1; then
  echo "ai-changelog not found, skipping changelog"
  exit 0
fi

if [ -z "${api_key_env}" ]; then
  echo "{api_key_env} not set, skipping changelog"
  exit 0
fi

echo "Generating changelog..."
if ai-changelog </dev/null; then
  echo "Changelog updated"
else
  echo "Changelog generation failed - push blocked"
  echo "Use 'git push --no-verify' to skip"
  exit 1
fi
"""


def render_hook(ai_config: AIConfig) -> str:
    return HOOK_TEMPLATE.replace("{api_key_env}", ai_config.api_key_env)


def install_pre_push_hook(ai_config: AIConfig, cwd: Optional[str] = None) -> Path:
    """
    Write an executable pre-push hook and return its path.

    Stdin is redirected from /dev/null so the hook never opens the
    interactive branch selector.
    """

    hooks_dir = git_adapter.get_hooks_dir(cwd=cwd)
    if not hooks_dir:
        raise GitError("could not locate the git hooks directory; run inside a git repository")

    hooks_path = Path(hooks_dir)
    if cwd is not None and not hooks_path.is_absolute():
        hooks_path = Path(cwd) / hooks_path
    hooks_path.mkdir(parents=True, exist_ok=True)

    hook = hooks_path / "pre-push"
    hook.write_text(render_hook(ai_config), encoding="utf-8")
    hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    LOG.info("Installed pre-push hook at %s", hook)
    return hook
