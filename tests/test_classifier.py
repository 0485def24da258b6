import itertools

from ai_changelog.analysis.classifier import get_scope, should_ignore


def test_directory_pattern_matches_by_prefix():
    assert should_ignore("dist/app.js", ["dist/"])
    assert not should_ignore("src/dist/app.js", ["dist/"])


def test_wildcard_pattern_is_unanchored():
    assert should_ignore("static/vendor.min.js", ["*.min.js"])
    assert should_ignore("config/.env.local", ["*.env*"])
    assert not should_ignore("src/app.js", ["*.min.js"])


def test_plain_pattern_matches_substring_or_suffix():
    assert should_ignore("frontend/package-lock.json", ["package-lock.json"])
    assert should_ignore("yarn.lock", ["yarn.lock"])
    assert not should_ignore("src/lockfile.py", ["yarn.lock"])


def test_should_ignore_is_order_independent():
    patterns = ["*.png", "dist/", "yarn.lock"]
    paths = ["dist/a.js", "img/logo.png", "src/main.py", "web/yarn.lock"]
    for path in paths:
        results = {should_ignore(path, list(order)) for order in itertools.permutations(patterns)}
        assert len(results) == 1


def test_scope_scenario_without_mapping():
    files = ["src/components/Button.tsx", "docs/README.md", "tests/unit/auth.test.js"]
    patterns = ["*.min.js"]

    assert [f for f in files if not should_ignore(f, patterns)] == files
    assert [get_scope(f, {}) for f in files] == ["components", "docs", "tests"]


def test_explicit_mapping_wins_in_order():
    mapping = {"src/api/**": "api", "src/**": "source", "*.config.*": "config"}

    assert get_scope("src/api/v1/users.py", mapping) == "api"
    assert get_scope("src/lib/thing.py", mapping) == "source"
    assert get_scope("vite.config.ts", mapping) == "config"


def test_single_star_does_not_cross_directories():
    mapping = {"src/*/index.ts": "entry"}

    assert get_scope("src/app/index.ts", mapping) == "entry"
    assert get_scope("src/app/nested/index.ts", {"src/*/index.ts": "entry"}) == "app"


def test_fallback_heuristics():
    assert get_scope("setup.cfg", {}) == "config"
    assert get_scope("lib/test_parser.py", {}) == "tests"
    assert get_scope("src/core/engine/run.py", {}) == "core"
    assert get_scope("src/main.py", {}) == "src"
    assert get_scope("server/app.py", {}) == "server"
    assert get_scope("main.py", {}) == "core"
