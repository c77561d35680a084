from beenthere.core.database import Base
from beenthere.version import __version__


def test_health_and_version(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/version").json() == {"version": __version__}


def test_cities_in_state(client):
    response = client.get("/states/NC/cities")
    assert response.status_code == 200
    assert response.json() == {"cities": ["Charlotte", "Raleigh"]}

    assert client.get("/states/va/cities").json() == {"cities": []}


def test_cities_in_unknown_state(client):
    response = client.get("/states/xx/cities")
    assert response.status_code == 404
    assert response.json()["detail"] == "no such state"


def test_create_visit(client):
    response = client.post("/users/testman/visits", json={"city": "Raleigh", "state": "nc"})

    assert response.status_code == 200
    visit = response.json()
    assert visit["id"]
    assert visit["city"] == "Raleigh"
    assert visit["state"] == "NC"
    assert visit["user"] == "testman"
    assert visit["timestamp"]


def test_create_visit_ignores_extra_fields(client):
    response = client.post(
        "/users/testman/visits",
        json={"city": "Raleigh", "state": "NC", "user": "someone-else", "id": "forged"},
    )

    visit = response.json()
    assert visit["user"] == "testman"
    assert visit["id"] != "forged"


def test_create_visit_in_uncatalogued_city(client):
    response = client.post("/users/testman/visits", json={"city": "Boone", "state": "NC"})
    assert response.status_code == 200


def test_create_visit_rejects_bad_bodies(client):
    empty = client.post("/users/testman/visits", content=b"", headers={"Content-Type": "application/json"})
    assert empty.status_code == 400
    assert empty.json()["detail"] == "unable to parse body: empty body"

    garbage = client.post("/users/testman/visits", content=b"{not json", headers={"Content-Type": "application/json"})
    assert garbage.status_code == 400

    not_an_object = client.post("/users/testman/visits", json=["Raleigh", "NC"])
    assert not_an_object.status_code == 400


def test_create_visit_requires_city_and_state(client):
    response = client.post("/users/testman/visits", json={"state": "NC"})
    assert response.status_code == 400
    assert response.json()["detail"] == {"message": "invalid visit", "invalid": "missing 'city' field"}

    response = client.post("/users/testman/visits", json={"city": "Raleigh", "state": ""})
    assert response.status_code == 400
    assert response.json()["detail"]["invalid"] == "missing 'state' field"


def test_create_visit_in_unknown_state(client):
    response = client.post("/users/testman/visits", json={"city": "Springfield", "state": "ZZ"})
    assert response.status_code == 400
    assert response.json()["detail"] == {"message": "invalid visit", "invalid": "no such state"}


def test_list_visits_newest_first(client, insert_visit):
    first = insert_visit("testman", "Raleigh", "NC")
    second = insert_visit("testman", "Atlanta", "GA")

    response = client.get("/users/testman/visits")

    assert response.status_code == 200
    assert [v["id"] for v in response.json()["visits"]] == [second, first]


def test_list_visits_of_unknown_user(client):
    response = client.get("/users/nobody/visits")
    assert response.status_code == 200
    assert response.json() == {"visits": []}


def test_list_visits_pagination(client, insert_visit):
    ids = [insert_visit("testman", "Raleigh", "NC") for _ in range(5)]
    newest_first = list(reversed(ids))

    page = client.get("/users/testman/visits", params={"start": 1, "limit": 2}).json()
    assert [v["id"] for v in page["visits"]] == newest_first[1:3]

    past_the_end = client.get("/users/testman/visits", params={"start": 10}).json()
    assert past_the_end == {"visits": []}


def test_list_visits_limit_is_clamped(client, insert_visit):
    for _ in range(60):
        insert_visit("testman", "Raleigh", "NC")

    default_page = client.get("/users/testman/visits").json()["visits"]
    assert len(default_page) == 20

    clamped = client.get("/users/testman/visits", params={"limit": 1000}).json()["visits"]
    assert len(clamped) == 50


def test_list_visits_rejects_bad_paging(client):
    assert client.get("/users/testman/visits", params={"start": "abc"}).status_code == 400
    assert client.get("/users/testman/visits", params={"start": -1}).status_code == 400
    assert client.get("/users/testman/visits", params={"limit": 0}).status_code == 400
    assert client.get("/users/testman/visits", params={"limit": "1.5"}).status_code == 400

    too_far = client.get("/users/testman/visits", params={"start": 10**20})
    assert too_far.status_code == 400
    assert "start" in too_far.json()["detail"]

    assert client.get("/users/testman/visits", params={"start": 2**63 - 1}).json() == {"visits": []}


def test_delete_visit(client):
    created = client.post("/users/testman/visits", json={"city": "Raleigh", "state": "NC"}).json()

    response = client.delete(f"/users/testman/visits/{created['id']}")
    assert response.status_code == 204
    assert client.get("/users/testman/visits").json() == {"visits": []}

    again = client.delete(f"/users/testman/visits/{created['id']}")
    assert again.status_code == 204


def test_visited_cities_and_states(client):
    for city, state in [("Raleigh", "nc"), ("Charlotte", "NC"), ("Raleigh", "NC"), ("Atlanta", "ga")]:
        assert client.post("/users/testman/visits", json={"city": city, "state": state}).status_code == 200

    cities = client.get("/users/testman/visits/cities")
    assert cities.json() == {"cities": ["Atlanta", "Charlotte", "Raleigh"]}

    states = client.get("/users/testman/visits/states")
    assert states.json() == {"states": ["Georgia", "North Carolina"]}


def test_visited_states_keep_unknown_codes(client, insert_visit):
    insert_visit("testman", "Raleigh", "NC")
    insert_visit("testman", "San Juan", "PR")

    assert client.get("/users/testman/visits/states").json() == {"states": ["North Carolina", "PR"]}


def test_nothing_visited_yet(client):
    assert client.get("/users/nobody/visits/cities").json() == {"cities": []}
    assert client.get("/users/nobody/visits/states").json() == {"states": []}


def test_store_failures_are_server_errors(app, client):
    Base.metadata.drop_all(bind=app.state.engine)

    saved = client.post("/users/testman/visits", json={"city": "Raleigh", "state": "NC"})
    assert saved.status_code == 500
    assert saved.json()["detail"] == "unable to save user visit"

    assert client.get("/users/testman/visits").status_code == 500
    assert client.get("/users/testman/visits/cities").status_code == 500
    assert client.get("/users/testman/visits/states").status_code == 500
    assert client.get("/states/nc/cities").status_code == 500

    deleted = client.delete("/users/testman/visits/visit-001")
    assert deleted.status_code == 500
    assert deleted.json()["detail"] == "unable to delete user visit"

    Base.metadata.create_all(bind=app.state.engine)


def test_visit_lifecycle(client):
    first = client.post("/users/testman/visits", json={"city": "Raleigh", "state": "nc"})
    assert first.status_code == 200
    first = first.json()
    assert first["state"] == "NC"
    assert first["user"] == "testman"
    assert first["id"]

    assert client.get("/users/testman/visits").json() == {"visits": [first]}

    assert client.post("/users/testman/visits", json={"city": "Charlotte", "state": "NC"}).status_code == 200
    assert client.get("/users/testman/visits/states").json() == {"states": ["North Carolina"]}
    assert len(client.get("/users/testman/visits/cities").json()["cities"]) == 2

    assert client.delete(f"/users/testman/visits/{first['id']}").status_code == 204
    remaining = client.get("/users/testman/visits").json()["visits"]
    assert [v["city"] for v in remaining] == ["Charlotte"]


def test_empty_body_creates_nothing(client):
    response = client.post("/users/testman/visits", content=b"")
    assert response.status_code == 400
    assert client.get("/users/testman/visits").json() == {"visits": []}
