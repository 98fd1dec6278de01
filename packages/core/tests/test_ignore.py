"""Tests for path exclusion rules."""

from commitguard_core.ignore import (
    DEFAULT_IGNORE_PATTERNS,
    SENSITIVE_KEYWORDS,
    IgnoreMatcher,
    compile_rule,
    contains_sensitive_keyword,
    load_ignore_patterns,
)


class TestCompileRule:
    def test_glob_matches_basename(self):
        rule = compile_rule("*.min.js")
        assert rule.matches("static/app.min.js", "app.min.js")

    def test_glob_matches_full_path(self):
        rule = compile_rule("dist/*")
        assert rule.matches("dist/bundle.js", "bundle.js")

    def test_glob_is_anchored(self):
        rule = compile_rule("dist/*")
        assert not rule.matches("src/dist/bundle.js", "bundle.js")

    def test_glob_escapes_regex_metacharacters(self):
        rule = compile_rule("*.min.js")
        assert not rule.matches("appXminXjs", "appXminXjs")

    def test_literal_is_substring_match(self):
        rule = compile_rule(".DS_Store")
        assert rule.regex is None
        assert rule.matches("assets/.DS_Store", ".DS_Store")

    def test_literal_does_not_match_unrelated_path(self):
        assert not compile_rule("yarn.lock").matches("src/a.ts", "a.ts")


class TestSensitiveKeywords:
    def test_every_keyword_excludes_regardless_of_patterns(self):
        matcher = IgnoreMatcher(include_defaults=False)
        for keyword in SENSITIVE_KEYWORDS:
            assert matcher.should_exclude(f"src/my_{keyword}_helper.py"), keyword

    def test_case_insensitive(self):
        assert contains_sensitive_keyword("config/API_KEY.txt")
        assert contains_sensitive_keyword("docs/Passwords.md")

    def test_clean_path(self):
        assert not contains_sensitive_keyword("src/a.ts")

    def test_keyword_as_substring_still_excludes(self):
        # "monkey.py" contains "key"; the check is a plain substring test.
        assert IgnoreMatcher(include_defaults=False).should_exclude("zoo/monkey.py")


class TestIgnoreMatcher:
    def test_env_file_excluded(self):
        assert IgnoreMatcher().should_exclude(".env.production")

    def test_source_file_kept(self):
        assert not IgnoreMatcher().should_exclude("src/a.ts")

    def test_lockfiles_excluded(self):
        matcher = IgnoreMatcher()
        assert matcher.should_exclude("package-lock.json")
        assert matcher.should_exclude("backend/poetry.lock")

    def test_directory_patterns(self):
        matcher = IgnoreMatcher()
        assert matcher.should_exclude("node_modules/left-pad/index.js")
        assert matcher.should_exclude("build/output.js")

    def test_extra_patterns_added(self):
        matcher = IgnoreMatcher(extra_patterns=["*.generated.py"])
        assert matcher.should_exclude("api/client.generated.py")
        assert not IgnoreMatcher().should_exclude("api/client.generated.py")

    def test_blank_extra_patterns_skipped(self):
        matcher = IgnoreMatcher(extra_patterns=["", "docs/*"], include_defaults=False)
        assert len(matcher.rules) == 1

    def test_without_defaults(self):
        matcher = IgnoreMatcher(include_defaults=False)
        assert not matcher.should_exclude("yarn.lock")

    def test_defaults_include_secret_file_globs(self):
        assert "*.pem" in DEFAULT_IGNORE_PATTERNS
        assert "*.env*" in DEFAULT_IGNORE_PATTERNS


class TestLoadIgnorePatterns:
    def test_missing_file_returns_empty(self, tmp_path):
        assert load_ignore_patterns(tmp_path / "nope") == []

    def test_skips_comments_and_blank_lines(self, tmp_path):
        path = tmp_path / ".commitguard-ignore"
        path.write_text("# generated code\n\n*.pb.go\n  migrations/*  \n")
        assert load_ignore_patterns(path) == ["*.pb.go", "migrations/*"]

    def test_undecodable_file_returns_empty(self, tmp_path):
        path = tmp_path / ".commitguard-ignore"
        path.write_bytes(b"\xff\xfe\xfa")
        assert load_ignore_patterns(path) == []
