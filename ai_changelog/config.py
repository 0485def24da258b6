"""
Configuration model for ai-changelog.

The CLI gathers repository metadata, calls load_config once, and passes
the resulting immutable Config down into every component so behavior
can be adjusted without relying on global state.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

LOG = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".changelogignore"

DEFAULT_IGNORE: Tuple[str, ...] = (
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "poetry.lock",
    "*.map",
    "*.min.js",
    "*.min.css",
    "*.png",
    "*.jpg",
    "*.gif",
    "*.webp",
    "*.mp4",
    "*.env*",
    "*.pem",
    "*.key",
    "dist/",
    "build/",
    "node_modules/",
    ".git/",
)

DEFAULT_SCOPES: Tuple[Tuple[str, str], ...] = (
    ("src/components/**", "ui"),
    ("src/features/**", "features"),
    ("src/utils/**", "utils"),
    ("src/api/**", "api"),
    ("docs/**", "docs"),
    ("tests/**", "tests"),
    ("*.config.*", "config"),
)

PLATFORMS: Tuple[str, ...] = ("github", "gitlab", "bitbucket", "azure")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class AIConfig:
    """Parameters for the single language-model request of a run."""

    model: str = "gemini-1.5-pro"
    temperature: float = 0.2
    max_output_tokens: int = 8192
    api_key_env: str = "GEMINI_API_KEY"
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: Optional[float] = None


@dataclass(frozen=True)
class OutputConfig:
    """
    Where rendered markdown goes.

    mode is "append" (merge into an existing changelog) or "standalone"
    (overwrite a self-contained preview file). changelog_path is the
    file scanned for previous version headers.
    """

    path: str = ".changelog-next.md"
    mode: str = "standalone"
    changelog_path: str = "CHANGELOG.md"
    auto_increment: bool = True


@dataclass(frozen=True)
class PlatformConfig:
    """Hosting platform details used to build PR, ticket and compare links."""

    name: str = "github"
    repo_url: Optional[str] = None
    ticket_url_template: Optional[str] = None
    remote: str = "origin"


@dataclass(frozen=True)
class UIConfig:
    max_branches_display: int = 10
    recent_branch_limit: int = 10


@dataclass(frozen=True)
class Config:
    """
    Top-level configuration for an ai-changelog run.
    """

    range: Optional[str] = None
    base: Optional[str] = None
    dry_run: bool = False
    fetch: bool = True
    verbosity: int = 0
    ignore: Tuple[str, ...] = DEFAULT_IGNORE
    scopes: Tuple[Tuple[str, str], ...] = DEFAULT_SCOPES
    block_breaking: bool = True
    breaking_ok: bool = False
    ai: AIConfig = field(default_factory=AIConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    platform: PlatformConfig = field(default_factory=PlatformConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    @property
    def scope_mapping(self) -> Dict[str, str]:
        return dict(self.scopes)


def output_mode_for(path: str) -> str:
    """
    Return the merge mode implied by an output path.

    Writing to a file named CHANGELOG.md merges into it; any other
    target receives a standalone preview document.
    """

    return "append" if Path(path).name.upper() == "CHANGELOG.MD" else "standalone"


def read_ignore_file(repo_root: Path) -> List[str]:
    """
    Return extra ignore patterns from the repository's ignore file.

    Blank lines and lines starting with '#' are skipped. A missing file
    yields no patterns.
    """

    path = repo_root / IGNORE_FILE_NAME
    if not path.is_file():
        return []

    patterns: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        patterns.append(stripped)
    LOG.debug("Loaded %d ignore patterns from %s", len(patterns), path)
    return patterns


def normalize_remote_url(remote_url: str) -> str:
    """
    Convert a git remote URL into the https URL of the repository page.

    Handles scp-style SSH remotes (git@host:owner/repo.git), ssh://
    URLs, embedded credentials, and Azure DevOps SSH remotes.
    """

    url = remote_url.strip()

    azure_ssh = re.match(r"^(?:ssh://)?git@ssh\.dev\.azure\.com(?::v3|:22/v3|/v3)/([^/]+)/([^/]+)/(.+)$", url)
    if azure_ssh:
        org, project, repo = azure_ssh.groups()
        return f"https://dev.azure.com/{org}/{project}/_git/{_strip_git_suffix(repo)}"

    scp_like = re.match(r"^(?:[^@/]+@)?([^:/]+):(?!//)(.+)$", url)
    if scp_like and "://" not in url:
        host, path = scp_like.groups()
        return f"https://{host}/{_strip_git_suffix(path)}"

    url = re.sub(r"^(?:ssh|git|http|https)://", "", url)
    url = re.sub(r"^[^@/]+@", "", url)
    # Drop an explicit port on ssh remotes (host:22/owner/repo).
    url = re.sub(r"^([^/:]+):\d+/", r"\1/", url)
    return f"https://{_strip_git_suffix(url)}"


def _strip_git_suffix(path: str) -> str:
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path


def detect_platform(repo_url: Optional[str]) -> str:
    """
    Guess the hosting platform from a repository URL.

    Unrecognized hosts fall back to GitHub's URL scheme.
    """

    if not repo_url:
        return "github"
    lowered = repo_url.lower()
    if "gitlab" in lowered:
        return "gitlab"
    if "bitbucket" in lowered:
        return "bitbucket"
    if "dev.azure.com" in lowered or "visualstudio.com" in lowered:
        return "azure"
    return "github"


def load_config(
    *,
    repo_root: Path,
    remote_url: Optional[str] = None,
    remote: str = "origin",
    range_: Optional[str] = None,
    base: Optional[str] = None,
    output: Optional[str] = None,
    dry_run: bool = False,
    fetch: bool = True,
    verbosity: int = 0,
    auto_increment: bool = True,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Build the run configuration from CLI values, environment, and
    repository metadata.
    """

    if env is None:
        env = os.environ

    repo_url = normalize_remote_url(remote_url) if remote_url else None
    platform_name = env.get("CHANGELOG_PLATFORM", "").strip().lower() or detect_platform(repo_url)
    if platform_name not in PLATFORMS:
        LOG.warning("Unknown platform %r; using GitHub link format", platform_name)
        platform_name = "github"

    output_path = output or OutputConfig.path
    mode = output_mode_for(output_path)
    changelog_path = output_path if mode == "append" else OutputConfig.changelog_path
    if env.get("CHANGELOG_AUTO_INCREMENT", "").strip().lower() in _FALSY:
        auto_increment = False

    ai_config = AIConfig(model=env.get("GEMINI_MODEL", "").strip() or AIConfig.model)

    config = Config(
        range=range_,
        base=base,
        dry_run=dry_run,
        fetch=fetch,
        verbosity=verbosity,
        ignore=DEFAULT_IGNORE + tuple(read_ignore_file(repo_root)),
        breaking_ok=env.get("BREAKING_OK", "").strip().lower() in _TRUTHY,
        ai=ai_config,
        output=OutputConfig(
            path=str(output_path),
            mode=mode,
            changelog_path=str(changelog_path),
            auto_increment=auto_increment,
        ),
        platform=PlatformConfig(
            name=platform_name,
            repo_url=repo_url,
            ticket_url_template=env.get("CHANGELOG_TICKET_URL") or None,
            remote=remote,
        ),
    )
    LOG.debug("Loaded configuration: %s", config)
    return config
