from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from main import DEFAULT_FORM, app


@pytest.fixture
def client():
    return TestClient(app)


def test_home_shows_defaults(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Calorie Calculator" in response.text
    assert 'value="33"' in response.text
    assert 'value="62"' in response.text
    assert "Daily Caloric Intake" not in response.text


def test_calculate_shows_result_and_progress_link(client):
    response = client.post("/calculate", data=DEFAULT_FORM)
    assert response.status_code == 200
    assert "Daily Caloric Intake: 1372 kcal" in response.text
    expected = (date.today() + timedelta(weeks=28)).strftime("%b %d, %Y")
    assert f"Estimated Date to Reach Target Weight: {expected}" in response.text
    assert "View Weekly Progress" in response.text


def test_calculate_with_target_date(client):
    target = date.today() + timedelta(days=70)
    form = dict(DEFAULT_FORM, target_date=target.isoformat())
    response = client.post("/calculate", data=form)
    assert response.status_code == 200
    assert target.strftime("%b %d, %Y") in response.text


def test_calculate_rejects_non_numeric_age(client):
    form = dict(DEFAULT_FORM, age="thirty")
    response = client.post("/calculate", data=form)
    assert response.status_code == 400
    assert "Please enter valid numbers" in response.text
    assert "Daily Caloric Intake" not in response.text
    assert "View Weekly Progress" not in response.text


def test_no_progress_link_when_target_not_below_weight(client):
    form = dict(DEFAULT_FORM, target_weight="80")
    response = client.post("/calculate", data=form)
    assert response.status_code == 200
    assert "Daily Caloric Intake" in response.text
    assert "View Weekly Progress" not in response.text

    response = client.get("/progress", follow_redirects=False)
    assert response.status_code == 303
    assert client.get("/progress.png").status_code == 404


def test_progress_without_calculation_redirects(client):
    response = client.get("/progress", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert client.get("/progress.png").status_code == 404


def test_progress_view_after_calculation(client):
    client.post("/calculate", data=dict(DEFAULT_FORM, weight_unit="lb", weight="165", target_weight="140"))

    page = client.get("/progress")
    assert page.status_code == 200
    assert "Weekly Weight Progress" in page.text
    assert "165.0 lb" in page.text

    chart = client.get("/progress.png")
    assert chart.status_code == 200
    assert chart.headers["content-type"] == "image/png"
    assert chart.content.startswith(b"\x89PNG")


def test_failed_calculation_clears_progress(client):
    client.post("/calculate", data=DEFAULT_FORM)
    assert client.get("/progress").status_code == 200

    client.post("/calculate", data=dict(DEFAULT_FORM, weight="heavy"))
    response = client.get("/progress", follow_redirects=False)
    assert response.status_code == 303


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_calculate_rejects_absurd_weight(client):
    response = client.post("/calculate", data=dict(DEFAULT_FORM, weight="1e12"))
    assert response.status_code == 400
    assert "weight" in response.text
    assert "View Weekly Progress" not in response.text
