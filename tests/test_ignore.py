import pytest

from pushtree.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatternError, compile_rule, compile_rules, should_ignore


@pytest.fixture
def rules():
    return compile_rules(DEFAULT_IGNORE_PATTERNS)


@pytest.mark.parametrize(
    "path",
    [
        "node_modules",
        "node_modules/lib/index.js",
        "packages/web/node_modules/x.js",
        ".git",
        ".gitignore",  # substring rules are unanchored
        "dist/bundle.js",
        "build",
        "server.log",
        "logs/server.log.1",
        "a/.DS_Store",
        "project-backup.tar.gz",
    ],
)
def test_default_rules_ignore(rules, path):
    assert should_ignore(path, rules)


@pytest.mark.parametrize("path", ["src/app.ts", "README.md", "Dist/app.js", "changelog.txt"])
def test_default_rules_keep(rules, path):
    assert not should_ignore(path, rules)


def test_wildcard_keeps_literal_characters():
    rule = compile_rule("*.log")
    assert rule.matches("debug.log")
    # '.' is literal, not "any character"
    assert not rule.matches("debuglog")


def test_wildcard_is_unanchored():
    rule = compile_rule("tmp*cache")
    assert rule.matches("src/tmp-build-cache/file")
    assert rule.matches("tmpcache")
    assert not rule.matches("cache/tmp")


def test_matching_is_case_sensitive():
    rules = compile_rules(["Build"])
    assert should_ignore("Build/out", rules)
    assert not should_ignore("build/out", rules)


def test_multiple_wildcards_rejected():
    with pytest.raises(IgnorePatternError):
        compile_rule("*.min.*")


def test_empty_pattern_rejected():
    with pytest.raises(IgnorePatternError):
        compile_rule("")


def test_no_rules_ignores_nothing():
    assert not should_ignore("node_modules/x", [])
