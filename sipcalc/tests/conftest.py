from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from sipcalc.app import create_app
from sipcalc.config import Settings


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(database_path=str(tmp_path / "sipcalc.db"))


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
