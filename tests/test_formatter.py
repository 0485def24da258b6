import datetime

from ai_changelog.config import PlatformConfig
from ai_changelog.domain import ChangelogEntry
from ai_changelog.formatter import (
    BREAKING_CATEGORY,
    OTHER_CATEGORY,
    compare_url,
    format_entry,
    format_section,
    group_by_category,
    next_version,
)

DATE = datetime.date(2024, 1, 2)


def _entry(type_, description, scope="", **kwargs):
    return ChangelogEntry(type=type_, scope=scope, description=description, **kwargs)


def test_breaking_entries_render_first_then_canonical_order():
    entries = [
        _entry("feat", "Add dark mode", scope="ui"),
        _entry("breaking", "Remove v1 endpoints", scope="api"),
        _entry("fix", "Crash on startup"),
    ]

    section = format_section(entries, PlatformConfig(), "0.0.1", date=DATE)

    assert section == (
        "## [0.0.1] - 2024-01-02\n"
        "\n"
        "### 💥 Breaking Changes\n"
        "\n"
        "- **api**: Remove v1 endpoints\n"
        "\n"
        "### 🚀 Features\n"
        "\n"
        "- **ui**: Add dark mode\n"
        "\n"
        "### 🐛 Bug Fixes\n"
        "\n"
        "- Crash on startup\n"
    )


def test_breaking_entries_ignore_declared_category():
    entries = [_entry("breaking", "Drop Python 3.7", category="🚀 Features")]

    assert list(group_by_category(entries)) == [BREAKING_CATEGORY]


def test_unknown_categories_follow_canonical_and_other_is_last():
    entries = [
        _entry("chore", "Bump deps"),
        _entry("feat", "Exports", category="🔒 Security"),
        _entry("docs", "Guide"),
        _entry("feat", "Search"),
    ]

    assert list(group_by_category(entries)) == [
        "🚀 Features",
        "📚 Documentation",
        "🔒 Security",
        OTHER_CATEGORY,
    ]


def test_version_bumps_patch_of_newest_header():
    existing = "# Changelog\n\n## [1.2.3] - 2024-01-01\n\n## [1.2.2] - 2023-12-01\n"

    assert next_version(existing) == "1.2.4"
    assert next_version(existing, auto_increment=False) == "1.2.3"


def test_version_defaults_when_no_header():
    assert next_version("") == "0.0.1"
    assert next_version("# Changelog\n\n## Unreleased\n") == "0.0.1"


def test_pr_links_per_platform():
    entry = _entry("fix", "Retry uploads", pr_number="12")

    github = PlatformConfig(name="github", repo_url="https://github.com/acme/app")
    gitlab = PlatformConfig(name="gitlab", repo_url="https://gitlab.com/acme/app")
    bitbucket = PlatformConfig(name="bitbucket", repo_url="https://bitbucket.org/acme/app")
    azure = PlatformConfig(name="azure", repo_url="https://dev.azure.com/acme/proj/_git/app")

    assert format_entry(entry, github) == "- Retry uploads ([#12](https://github.com/acme/app/pull/12))"
    assert "https://gitlab.com/acme/app/-/merge_requests/12" in format_entry(entry, gitlab)
    assert "https://bitbucket.org/acme/app/pull-requests/12" in format_entry(entry, bitbucket)
    assert "https://dev.azure.com/acme/proj/_git/app/pullrequest/12" in format_entry(entry, azure)
    assert format_entry(entry, PlatformConfig()) == "- Retry uploads (#12)"


def test_ticket_link_uses_template_or_inline_code():
    entry = _entry("feat", "Bulk export", scope="api", ticket_id="PROJ-9")

    templated = PlatformConfig(ticket_url_template="https://jira.example.com/browse/${ticketId}")

    assert format_entry(entry, templated) == (
        "- **api**: Bulk export ([PROJ-9](https://jira.example.com/browse/PROJ-9))"
    )
    assert format_entry(entry, PlatformConfig()) == "- **api**: Bulk export (`PROJ-9`)"


def test_details_render_as_nested_bullets():
    entry = _entry("improve", "Faster search", details=["Index titles", "Cache queries"])

    assert format_entry(entry, PlatformConfig()) == (
        "- Faster search\n  - Index titles\n  - Cache queries"
    )


def test_large_category_is_split_into_scopes():
    entries = [
        _entry("feat", "Login page", scope="ui"),
        _entry("feat", "Token refresh", scope="api"),
        _entry("feat", "Theme picker", scope="ui"),
        _entry("feat", "Telemetry opt-out"),
        _entry("feat", "Rate limits", scope="api"),
        _entry("feat", "Keyboard shortcuts", scope="General"),
    ]

    section = format_section(entries, PlatformConfig(), "1.0.1", date=DATE)

    assert section == (
        "## [1.0.1] - 2024-01-02\n"
        "\n"
        "### 🚀 Features\n"
        "\n"
        "- Telemetry opt-out\n"
        "- Keyboard shortcuts\n"
        "\n"
        "#### ui\n"
        "\n"
        "- Login page\n"
        "- Theme picker\n"
        "\n"
        "#### api\n"
        "\n"
        "- Token refresh\n"
        "- Rate limits\n"
    )


def test_five_entries_are_not_split():
    entries = [_entry("fix", f"Fix {i}", scope="ui") for i in range(5)]

    section = format_section(entries, PlatformConfig(), "1.0.1", date=DATE)

    assert "####" not in section
    assert section.count("- **ui**: Fix") == 5


def test_rendering_is_deterministic():
    entries = [
        _entry("feat", "Add dark mode", scope="ui", pr_number="3"),
        _entry("breaking", "Remove v1 endpoints", scope="api"),
    ]
    platform = PlatformConfig(repo_url="https://github.com/acme/app")

    first = format_section(entries, platform, "2.0.0", date=DATE)
    second = format_section(list(entries), platform, "2.0.0", date=DATE)

    assert first == second


def test_unknown_type_goes_to_other_changes():
    section = format_section([_entry("chore", "Bump deps")], PlatformConfig(), "0.0.1", date=DATE)

    assert f"### {OTHER_CATEGORY}\n\n- Bump deps\n" in section


def test_compare_urls():
    assert compare_url("main", "HEAD", PlatformConfig()) is None
    assert (
        compare_url("main", "feature", PlatformConfig(repo_url="https://github.com/acme/app"))
        == "https://github.com/acme/app/compare/main...feature"
    )
    assert (
        compare_url("main", "feature", PlatformConfig(name="gitlab", repo_url="https://gitlab.com/acme/app"))
        == "https://gitlab.com/acme/app/-/compare/main...feature"
    )
    assert (
        compare_url("main", "feature", PlatformConfig(name="bitbucket", repo_url="https://bitbucket.org/acme/app"))
        == "https://bitbucket.org/acme/app/branches/compare/feature%0Dmain"
    )
