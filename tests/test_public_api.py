from conftest import make_artwork


def test_health(client) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_list_artworks_filters_and_paginates(client, write_data) -> None:
    records = [make_artwork(i, title=f"Piece {i:02d}") for i in range(1, 21)]
    records.append(make_artwork(50, title="Hidden", status="pending"))
    write_data("submissions", records)

    resp = client.get("/api/artworks?page=3&limit=8&sort=title-asc")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total"] == 20
    assert data["total_pages"] == 3
    assert data["current_page"] == 3
    assert [a["id"] for a in data["artworks"]] == [17, 18, 19, 20]


def test_list_artworks_out_of_range_page(client, write_data) -> None:
    write_data("submissions", [make_artwork(i) for i in range(20)])
    data = client.get("/api/artworks?page=99").get_json()
    assert data["current_page"] == 3
    assert len(data["artworks"]) == 4


def test_list_artworks_bad_numbers_use_defaults(client, write_data) -> None:
    write_data("submissions", [make_artwork(i) for i in range(10)])
    data = client.get("/api/artworks?page=two&limit=lots").get_json()
    assert (data["current_page"], data["limit"], len(data["artworks"])) == (1, 8, 8)


def test_list_artworks_search_and_location(client, write_data) -> None:
    write_data("submissions", [
        make_artwork(1, title="Bridge", location_notes="Near Sydney CBD"),
        make_artwork(2, title="Bridge", location_notes="Perth"),
        make_artwork(3, title="Beach", location_notes="Bondi, NSW"),
    ])
    data = client.get("/api/artworks?search=BRIDGE&location=nsw").get_json()
    assert [a["id"] for a in data["artworks"]] == [1]

    data = client.get("/api/artworks?location=qld").get_json()
    assert data["total"] == 0


def test_list_artworks_empty_store(client) -> None:
    data = client.get("/api/artworks").get_json()
    assert data == {"total": 0, "total_pages": 0, "current_page": 1, "limit": 8, "artworks": []}


def test_list_artworks_missing_data_file(app, client) -> None:
    (app.config["DATA_DIR"] / "submissions.json").unlink()
    resp = client.get("/api/artworks")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Data file not found."}


def test_map_markers(client, write_data) -> None:
    write_data("submissions", [
        make_artwork(1, location="-33.86,151.20"),
        make_artwork(2, location="-34.92,138.60", location_sensitive=True, location_notes="Adelaide Hills"),
        make_artwork(3, location="-31.95,115.86", status="rejected"),
    ])
    markers = client.get("/api/artworks/map").get_json()["markers"]
    assert [(m["id"], m["kind"]) for m in markers] == [(1, "pin"), (2, "area")]


def test_unknown_api_route_is_json_404(client) -> None:
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Resource not found"}
