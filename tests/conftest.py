import pytest
from fastapi.testclient import TestClient

from line_kpi.api.dependencies import get_kpi_checker
from line_kpi.api.main import app
from line_kpi.kpi.checker import KpiChecker
from line_kpi.sheets.client import reset_sheets_client

from .sheet_fixtures import FakeSheetsClient, default_ranges


@pytest.fixture
def fake_sheets():
    return FakeSheetsClient(default_ranges())


@pytest.fixture
def checker(fake_sheets):
    return KpiChecker(sheets_client=fake_sheets)


@pytest.fixture
def api_client(checker):
    app.dependency_overrides[get_kpi_checker] = lambda: checker
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_cached_client():
    reset_sheets_client()
    yield
    reset_sheets_client()
