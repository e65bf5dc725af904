import pytest

from catalogue import PLACEHOLDER_IMAGE, Catalogue
from conftest import signup
from documents import DocumentStore
from errors import NotFound


@pytest.fixture
def catalogue(tmp_path):
    return Catalogue(DocumentStore(str(tmp_path)))


def test_every_view_counts(catalogue):
    for _ in range(5):
        catalogue.view_resource("r1")
    assert catalogue.get_resource("r1")["views"] == 5
    assert catalogue.metrics() == {"totalViews": 5, "resourceCount": 2}


def test_view_unknown_resource(catalogue):
    with pytest.raises(NotFound):
        catalogue.view_resource("nope")


def test_add_update_delete(catalogue):
    added = catalogue.add_resource({"title": "Sleep Hygiene", "category": "program"})
    assert added["views"] == 0
    assert added["image"] == PLACEHOLDER_IMAGE
    assert added["link"] == "#"
    assert catalogue.list_resources()[0]["id"] == added["id"]
    assert {r["id"] for r in catalogue.list_resources("program")} == {"r2", added["id"]}

    updated = catalogue.update_resource(added["id"], {"title": "", "description": "Wind down"})
    assert updated["title"] == "Sleep Hygiene"
    assert updated["description"] == "Wind down"

    catalogue.delete_resource(added["id"])
    with pytest.raises(NotFound):
        catalogue.get_resource(added["id"])
    with pytest.raises(NotFound):
        catalogue.delete_resource(added["id"])


def test_add_defaults(catalogue):
    added = catalogue.add_resource({})
    assert added["title"] == "Untitled"
    assert added["category"] == "general"


def test_doctors(catalogue):
    assert [d["id"] for d in catalogue.list_doctors()] == ["d1", "d2", "d3"]
    assert catalogue.resolve_doctor("d3")["title"] == "Sports Medicine"
    with pytest.raises(NotFound):
        catalogue.resolve_doctor("d9")


def test_resource_detail_route_counts_views(client):
    signup(client, "s1", "p1")
    for _ in range(3):
        assert client.get("/resources/r1").status_code == 200
    assert client.get("/metrics").get_json() == {"totalViews": 3, "resourceCount": 2}
    assert client.get("/resources/missing").status_code == 404


def test_public_routes(client):
    assert len(client.get("/doctors").get_json()["doctors"]) == 3
    programs = client.get("/programs").get_json()["resources"]
    assert [r["id"] for r in programs] == ["r2"]


def test_admin_resource_management(client):
    signup(client, "boss", "pw", "admin")
    resp = client.post("/admin/add", data={"title": "Hydration", "link": "https://example.org"})
    assert resp.status_code == 302
    resources = client.get("/admin").get_json()["resources"]
    new_id = resources[0]["id"]
    assert resources[0]["title"] == "Hydration"

    client.post(f"/admin/update/{new_id}", data={"category": "nutrition"})
    assert client.get(f"/admin/edit/{new_id}").get_json()["resource"]["category"] == "nutrition"

    client.post(f"/admin/delete/{new_id}")
    assert client.get(f"/admin/edit/{new_id}").status_code == 404

    per_resource = client.get("/admin/metrics").get_json()
    assert per_resource["resourceCount"] == 2
    assert {r["id"] for r in per_resource["resources"]} == {"r1", "r2"}


def test_health_tips_links_counseling(client):
    counseling = client.get("/health-tips").get_json()["counseling"]
    assert counseling["id"] == "r1"
    assert counseling["category"] == "mental-health"


def test_health_tips_without_counseling(client, services):
    services.catalogue.delete_resource("r1")
    assert client.get("/health-tips").get_json() == {"counseling": None}
