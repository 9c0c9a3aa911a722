"""End-to-end tests over local checkouts."""

import json

import pytest

from npm_ioc_scanner.core import (
    SKIP_DEV_ENV,
    resolve_sources,
    scan_repositories,
    scan_repository,
)
from npm_ioc_scanner.discovery import load_package_files, load_workflow_files
from npm_ioc_scanner.ingestion import DEFAULT_IOC_URLS, ConfigError, SourceUnavailable
from npm_ioc_scanner.matcher import MALICIOUS_WORKFLOW_PATTERN
from npm_ioc_scanner.validators.report_schema import validate_report


PNPM_LOCK = """lockfileVersion: '6.0'
packages:
  /test-ioc-multi@1.0.1:
    resolution: {integrity: sha512-x}
    dev: false
"""


@pytest.fixture
def checkout(tmp_path):
    root = tmp_path / "web"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps(
            {
                "name": "web",
                "dependencies": {"test-ioc-vulnerable": "^1.0.0"},
                "devDependencies": {"@test-ioc/scoped": "2.0.0"},
                "scripts": {"postinstall": "node bundle.js"},
            }
        ),
        encoding="utf-8",
    )
    (root / "packages" / "api").mkdir(parents=True)
    (root / "packages" / "api" / "pnpm-lock.yaml").write_text(PNPM_LOCK, encoding="utf-8")

    vendored = root / "node_modules" / "test-ioc-vulnerable"
    vendored.mkdir(parents=True)
    (vendored / "package.json").write_text('{"name": "test-ioc-vulnerable"}', encoding="utf-8")

    workflows = root / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "discussion.yaml").write_text(
        f"on: discussion\njobs:\n  x:\n    steps:\n      - run: {MALICIOUS_WORKFLOW_PATTERN}\n",
        encoding="utf-8",
    )
    (workflows / "ci.yml").write_text("on: push\n", encoding="utf-8")
    (workflows / "README.md").write_text(MALICIOUS_WORKFLOW_PATTERN, encoding="utf-8")
    return root


class TestDiscovery:
    def test_manifests_skip_vendor_dirs(self, checkout):
        files = load_package_files(checkout)

        assert [f.path for f in files] == ["package.json", "packages/api/pnpm-lock.yaml"]
        assert {f.repo_name for f in files} == {"web"}

    def test_repo_name_override(self, checkout):
        files = load_package_files(checkout, repo_name="acme/web")
        assert files[0].repo_name == "acme/web"

    def test_workflows(self, checkout):
        workflows = load_workflow_files(checkout)
        assert [w.path for w in workflows] == [
            ".github/workflows/ci.yml",
            ".github/workflows/discussion.yaml",
        ]

    def test_no_workflow_dir(self, tmp_path):
        assert load_workflow_files(tmp_path) == []


class TestScanRepository:
    """Scanning a checkout against a local IOC list."""

    def test_report(self, checkout, ioc_csv):
        report = scan_repository(checkout, list_sources=[str(ioc_csv)])

        assert report["hasFindings"] is True
        assert report["interrupted"] is False
        repo = report["repositories"][0]
        assert repo["repository"] == "web"
        assert repo["filesScanned"] == 2
        assert sorted((f["package"], f["file"]) for f in repo["findings"]) == [
            ("@test-ioc/scoped", "package.json"),
            ("test-ioc-multi", "packages/api/pnpm-lock.yaml"),
            ("test-ioc-vulnerable", "package.json"),
        ]
        assert repo["maliciousScripts"][0]["script"] == "postinstall"
        assert repo["maliciousWorkflows"][0]["file"] == ".github/workflows/discussion.yaml"

        totals = report["totals"]
        assert totals["findings"] == 5
        assert totals["vulnerablePackages"] == 3
        assert totals["iocEntries"] == 4
        assert report["sources"][0]["location"] == str(ioc_csv)
        assert report["sources"][0]["totalRecords"] == 3

        validate_report(report)

    def test_skip_dev(self, checkout, ioc_csv):
        report = scan_repository(checkout, list_sources=[str(ioc_csv)], include_dev=False)

        packages = {f["package"] for f in report["repositories"][0]["findings"]}
        assert "@test-ioc/scoped" not in packages

    def test_skip_dev_from_environment(self, checkout, ioc_csv, monkeypatch):
        monkeypatch.setenv(SKIP_DEV_ENV, "true")

        report = scan_repository(checkout, list_sources=[str(ioc_csv)])

        packages = {f["package"] for f in report["repositories"][0]["findings"]}
        assert packages == {"test-ioc-vulnerable", "test-ioc-multi"}

    def test_clean_checkout(self, tmp_path, ioc_csv):
        root = tmp_path / "clean"
        root.mkdir()
        (root / "package.json").write_text('{"dependencies": {"lodash": "4.17.21"}}', encoding="utf-8")

        report = scan_repository(root, list_sources=[str(ioc_csv)])

        assert report["hasFindings"] is False
        assert report["totals"]["uniquePackages"] == 1
        validate_report(report)

    def test_preloaded_database(self, checkout, vuln_db):
        report = scan_repository(checkout, db=vuln_db)
        assert report["totals"]["vulnerablePackages"] == 3

    def test_unavailable_sources(self, checkout, tmp_path):
        with pytest.raises(SourceUnavailable):
            scan_repository(checkout, list_sources=[str(tmp_path / "missing.csv")])


class TestScanRepositories:
    def test_several_checkouts(self, checkout, tmp_path, vuln_db):
        other = tmp_path / "other"
        other.mkdir()
        (other / "package.json").write_text(
            '{"dependencies": {"test-ioc-multi": "1.0.0"}}', encoding="utf-8"
        )

        report = scan_repositories([checkout, other], db=vuln_db)

        assert [r["repository"] for r in report["repositories"]] == ["web", "other"]
        assert report["totals"]["repositories"] == 2
        assert report["totals"]["filesScanned"] == 3

    def test_stop_between_repositories(self, checkout, tmp_path, vuln_db):
        calls = []

        def should_stop():
            calls.append(None)
            return len(calls) > 1

        report = scan_repositories([checkout, tmp_path], db=vuln_db, should_stop=should_stop)

        assert report["interrupted"] is True
        assert [r["repository"] for r in report["repositories"]] == ["web"]
        validate_report(report)


class TestResolveSources:
    def test_explicit_list_wins(self, tmp_path):
        assert resolve_sources(["a.csv", "b.csv"], tmp_path / "missing.json") == ["a.csv", "b.csv"]

    def test_config_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps({"feeds": [{"id": "local", "url": "iocs.csv"}]}), encoding="utf-8"
        )
        assert resolve_sources(None, path) == [str(tmp_path.resolve() / "iocs.csv")]

    def test_explicit_broken_config_is_an_error(self, tmp_path):
        with pytest.raises(ConfigError):
            resolve_sources(None, tmp_path / "missing.json")

    def test_defaults_without_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NPM_IOC_SCANNER_FEEDS_CONFIG", str(tmp_path / "missing.json"))
        assert resolve_sources() == list(DEFAULT_IOC_URLS)
