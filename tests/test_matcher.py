"""
Tests for PatternMatcher extension and exclusion rules.
"""

import logging
from pathlib import Path

import pathspec
import pytest

from dircat.config import ScanConfig
from dircat.matcher import PatternMatcher, compile_patterns
from dircat.models import Candidate, extension_of


def cand(rel: str) -> Candidate:
    return Candidate(path=Path("/root") / rel, rel=rel, extension=extension_of(rel.rsplit("/", 1)[-1]))


def matcher(tmp_path, **kwargs) -> PatternMatcher:
    return PatternMatcher(ScanConfig(root=tmp_path, **kwargs))


class TestExtensionOf:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("a.js", "js"),
            ("a.test.ts", "ts"),
            ("Makefile", None),
            (".bashrc", None),
            ("notes.", None),
            ("archive.tar.gz", "gz"),
            ("README.MD", "MD"),
        ],
    )
    def test_extension_of(self, name, expected):
        assert extension_of(name) == expected


class TestExtensionRule:
    def test_allow_list_member_accepted(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"js"}))
        assert m.accepts(cand("a.js"))
        assert not m.accepts(cand("c.ts"))

    def test_allow_list_accepts_leading_dot(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({".js", "ts"}))
        assert m.accepts(cand("a.js"))
        assert m.accepts(cand("c.ts"))

    def test_empty_allow_list_accepts_any_extension(self, tmp_path):
        m = matcher(tmp_path)
        assert m.accepts(cand("a.js"))
        assert m.accepts(cand("deep/x.whatever"))

    def test_extensionless_rejected_by_default(self, tmp_path):
        m = matcher(tmp_path)
        assert not m.accepts(cand("Makefile"))
        assert not m.accepts(cand("dir/.bashrc"))

    def test_extensionless_accepted_with_flag(self, tmp_path):
        m = matcher(tmp_path, include_no_ext=True)
        assert m.accepts(cand("Makefile"))

    def test_extensionless_flag_with_allow_list(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"js"}), include_no_ext=True)
        assert m.accepts(cand("Makefile"))
        assert m.accepts(cand("a.js"))
        assert not m.accepts(cand("c.ts"))

    def test_extension_case_sensitive_by_default(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"js"}))
        assert not m.accepts(cand("A.JS"))

    def test_extension_ignore_case(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"JS"}), case_sensitive=False)
        assert m.accepts(cand("A.js"))
        assert m.accepts(cand("b.Js"))


class TestExclusionRule:
    def test_double_star_directory_pattern(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"js"}), excludes=("**/test/**",))
        assert m.accepts(cand("a.js"))
        assert not m.accepts(cand("test/b.js"))
        assert not m.accepts(cand("src/test/deep/b.js"))

    def test_exclusion_overrides_extension(self, tmp_path):
        m = matcher(tmp_path, extensions=frozenset({"js"}), excludes=("a.js",))
        assert not m.accepts(cand("a.js"))

    def test_basename_pattern_matches_anywhere(self, tmp_path):
        m = matcher(tmp_path, excludes=("*.test.ts",))
        assert not m.accepts(cand("src/app.test.ts"))
        assert m.accepts(cand("src/app.ts"))

    def test_question_mark(self, tmp_path):
        m = matcher(tmp_path, excludes=("?.js",))
        assert not m.accepts(cand("a.js"))
        assert m.accepts(cand("ab.js"))

    def test_glob_case_sensitive_by_default(self, tmp_path):
        m = matcher(tmp_path, excludes=("**/Test/**",))
        assert m.accepts(cand("test/b.js"))

    def test_glob_ignore_case(self, tmp_path):
        m = matcher(tmp_path, excludes=("**/Test/**",), case_sensitive=False)
        assert not m.accepts(cand("test/b.js"))

    def test_default_excludes(self, tmp_path):
        m = matcher(tmp_path)
        assert not m.accepts(cand("node_modules/pkg/index.js"))
        assert not m.accepts(cand(".git/config.txt"))

    def test_default_excludes_disabled(self, tmp_path):
        m = matcher(tmp_path, default_excludes=False)
        assert m.accepts(cand("node_modules/pkg/index.js"))

    def test_gitignore_patterns(self, tmp_path):
        (tmp_path / ".gitignore").write_text("build/\n*.log\n", encoding="utf-8")
        m = matcher(tmp_path, use_gitignore=True)
        assert not m.accepts(cand("build/out.js"))
        assert not m.accepts(cand("debug.log"))
        assert m.accepts(cand("src/main.js"))

    def test_gitignore_ignored_unless_enabled(self, tmp_path):
        (tmp_path / ".gitignore").write_text("*.log\n", encoding="utf-8")
        m = matcher(tmp_path)
        assert m.accepts(cand("debug.log"))

    def test_gitignore_negation_does_not_reinclude_user_exclude(self, tmp_path):
        (tmp_path / ".gitignore").write_text("!keep.js\n", encoding="utf-8")
        m = matcher(tmp_path, use_gitignore=True, excludes=("*.js",))
        assert not m.accepts(cand("keep.js"))

    def test_excluded_dir(self, tmp_path):
        m = matcher(tmp_path, excludes=("build/",))
        assert m.is_excluded_dir("build")
        assert m.is_excluded_dir("src/build")
        assert not m.is_excluded_dir("src")
        assert m.is_excluded_dir("node_modules")


class TestCompilePatterns:
    def test_invalid_pattern_is_dropped(self, caplog, monkeypatch):
        real_from_lines = pathspec.GitIgnoreSpec.from_lines

        def fake_from_lines(lines):
            lines = list(lines)
            if "[bad" in lines:
                raise ValueError("Invalid git pattern")
            return real_from_lines(lines)

        caplog.set_level(logging.WARNING, logger="dircat")
        monkeypatch.setattr(pathspec.GitIgnoreSpec, "from_lines", fake_from_lines)
        spec = compile_patterns(["[bad", "*.js"])
        assert spec.match_file("a.js")
        assert "Ignoring invalid exclude pattern" in caplog.text

    def test_comments_and_blanks_match_nothing(self):
        spec = compile_patterns(["# comment", ""])
        assert not spec.match_file("a.js")
