"""Unit tests for taskboard/main.py."""

from typing import TYPE_CHECKING

from fastapi.testclient import TestClient

from taskboard.main import app, create_app
from tests.utils import api_path

if TYPE_CHECKING:
    from pytest_mock.plugin import MockerFixture


class TestApplication:
    """Application wiring."""

    def test_routes_are_mounted_under_prefix(self) -> None:
        paths = create_app().openapi()["paths"]

        assert api_path("/tasks") in paths
        assert api_path("/tasks/{task_id}") in paths
        assert api_path("/users") in paths
        assert api_path("/users/{user_id}") in paths

    def test_unknown_route_uses_envelope(self) -> None:
        response = TestClient(app).get(api_path("/projects"))

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found", "data": []}

    def test_wrong_method_uses_envelope(self) -> None:
        response = TestClient(app).patch(api_path("/tasks"))

        assert response.status_code == 405
        assert response.json()["data"] == []

    def test_lifespan_initializes_and_disposes(self, mocker: "MockerFixture") -> None:
        init_db = mocker.patch("taskboard.main.init_db")
        dispose = mocker.patch("taskboard.main.engine.dispose")

        with TestClient(create_app()):
            init_db.assert_called_once_with()
            dispose.assert_not_called()

        dispose.assert_called_once_with()
