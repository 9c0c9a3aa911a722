"""Shared fixtures."""

import pytest

from npm_ioc_scanner.ingestion import parse_csv


DATADOG_CSV = """package_name,package_versions,sources
test-ioc-vulnerable,1.0.0,"datadog"
test-ioc-multi,"1.0.0, 1.0.1",datadog
@test-ioc/scoped,2.0.0,datadog
"""


@pytest.fixture
def vuln_db():
    """A small database in the DataDog dialect."""
    return parse_csv(DATADOG_CSV, on_warning=lambda warning: None)


@pytest.fixture
def ioc_csv(tmp_path):
    """The same database written to a local CSV file."""
    path = tmp_path / "iocs.csv"
    path.write_text(DATADOG_CSV, encoding="utf-8")
    return path
