"""Tests for building absolute links from named routes."""

import pytest
from fastapi import APIRouter, Depends, FastAPI
from fastapi.testclient import TestClient

from src.user_api.api.http.deps import RequestLinkBuilder, get_link_builder
from src.user_api.core.services.pagination import LinkBuilder


@pytest.fixture
def links_client() -> TestClient:
    """An app whose named routes live on an included router, like the real one."""
    router = APIRouter(prefix="/things")

    @router.get("/{thing_id}", name="get_thing")
    def get_thing(thing_id: str) -> dict:
        return {"id": thing_id}

    @router.get("", name="get_things")
    def get_things() -> list:
        return []

    @router.post("/link")
    def make_link(
        body: dict, link_builder: LinkBuilder = Depends(get_link_builder)
    ) -> dict:
        assert isinstance(link_builder, RequestLinkBuilder)
        return {
            "link": link_builder(
                body["route"],
                path_params=body.get("path"),
                query_params=body.get("query"),
            )
        }

    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


class TestRequestLinkBuilder:
    def test_path_parameter_fills_route_template(self, links_client):
        response = links_client.post(
            "/things/link", json={"route": "get_thing", "path": {"thing_id": "abc"}}
        )

        assert response.json()["link"] == "http://testserver/things/abc"

    def test_query_parameters_are_appended(self, links_client):
        response = links_client.post(
            "/things/link",
            json={"route": "get_things", "query": {"pageNumber": 2, "pageSize": 5}},
        )

        assert response.json()["link"] == "http://testserver/things?pageNumber=2&pageSize=5"

    def test_link_without_parameters(self, links_client):
        response = links_client.post("/things/link", json={"route": "get_things"})

        assert response.json()["link"] == "http://testserver/things"


def test_created_location_resolves_through_app(client):
    """POST and PUT build Location from the id route on the included router."""
    created = client.post("/users", json={"firstName": "Ann", "lastName": "Smith"})
    user_id = created.json()

    assert created.status_code == 201
    assert created.headers["Location"] == f"http://testserver/users/{user_id}"
    assert client.get(created.headers["Location"]).status_code == 200
