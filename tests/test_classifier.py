"""Tests for file format classification."""

from pathlib import Path

import pytest

from npm_ioc_scanner.parsers import FileFormat, NpmLockfileGeneration, classify, is_yarn_berry
from npm_ioc_scanner.parsers.classifier import npm_lockfile_generations


YARN_CLASSIC = """# yarn lockfile v1

test-ioc-pkg@^1.0.0:
  version "1.0.0"
"""

YARN_BERRY_METADATA = """__metadata:
  version: 8

"pkg@npm:^1.0.0":
  version: 1.0.0
"""

YARN_BERRY_NPM_RANGE = """"test-ioc-pkg@npm:^1.0.0":
  version: 1.0.0
"""

YARN_CLASSIC_ALIAS = """# yarn lockfile v1

alias-pkg@npm:actual-pkg@^1.0.0:
  version "1.0.0"
"""


class TestClassifyByName:
    """File names select the parser family."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("package.json", FileFormat.MANIFEST),
            ("apps/web/package.json", FileFormat.MANIFEST),
            ("package-lock.json", FileFormat.NPM_LOCKFILE),
            ("npm-shrinkwrap.json", FileFormat.NPM_LOCKFILE),
            ("pnpm-lock.yaml", FileFormat.PNPM_LOCKFILE),
            ("yarn.lock", FileFormat.YARN_CLASSIC_LOCKFILE),
            ("README.md", FileFormat.UNKNOWN),
            ("package.json.bak", FileFormat.UNKNOWN),
        ],
    )
    def test_names(self, path, expected):
        assert classify(path) is expected

    def test_accepts_path_objects(self):
        assert classify(Path("sub") / "pnpm-lock.yaml") is FileFormat.PNPM_LOCKFILE

    def test_windows_separators(self):
        assert classify("sub\\package-lock.json") is FileFormat.NPM_LOCKFILE


class TestYarnGenerationSniffing:
    """Yarn Berry is told apart from Yarn Classic by content."""

    def test_classic(self):
        assert not is_yarn_berry(YARN_CLASSIC)
        assert classify("yarn.lock", YARN_CLASSIC) is FileFormat.YARN_CLASSIC_LOCKFILE

    def test_metadata_header(self):
        assert is_yarn_berry(YARN_BERRY_METADATA)
        assert classify("yarn.lock", YARN_BERRY_METADATA) is FileFormat.YARN_BERRY_LOCKFILE

    def test_metadata_header_anywhere(self):
        content = YARN_CLASSIC + "\n__metadata:\n  version: 6\n"
        assert is_yarn_berry(content)

    @pytest.mark.parametrize("range_start", ["^", "~", ">", "<", "=", "1", "0"])
    def test_npm_protocol_followed_by_range(self, range_start):
        content = f'"pkg@npm:{range_start}1.0.0":\n  version: 1.0.0\n'
        assert is_yarn_berry(content)

    def test_npm_protocol_range_without_metadata(self):
        assert is_yarn_berry(YARN_BERRY_NPM_RANGE)

    def test_classic_npm_alias_is_not_berry(self):
        assert not is_yarn_berry(YARN_CLASSIC_ALIAS)

    def test_comment_lines_are_ignored(self):
        assert not is_yarn_berry("# pkg@npm:^1.0.0:\n")

    def test_without_content_name_only(self):
        assert classify("yarn.lock") is FileFormat.YARN_CLASSIC_LOCKFILE


class TestNpmLockfileGenerations:
    def test_packages_map(self):
        doc = {"packages": {"": {}, "node_modules/a": {"version": "1.0.0"}}}
        assert npm_lockfile_generations(doc) == (NpmLockfileGeneration.PACKAGES_MAP,)

    def test_dependency_tree(self):
        doc = {"dependencies": {"a": {"version": "1.0.0"}}}
        assert npm_lockfile_generations(doc) == (NpmLockfileGeneration.DEPENDENCY_TREE,)

    def test_both_packages_first(self):
        doc = {"dependencies": {"a": {}}, "packages": {"node_modules/a": {}}}
        assert npm_lockfile_generations(doc) == (
            NpmLockfileGeneration.PACKAGES_MAP,
            NpmLockfileGeneration.DEPENDENCY_TREE,
        )

    def test_empty_or_wrong_shapes(self):
        assert npm_lockfile_generations({"packages": {}, "dependencies": []}) == ()
