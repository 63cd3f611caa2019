import os
import tempfile

# Keep the import-time seed out of the repo and never talk to a mail server
os.environ.setdefault("GALLERY_DATA_DIR", tempfile.mkdtemp(prefix="gallery-data-"))
os.environ.pop("MAIL_USERNAME", None)

import pytest
from werkzeug.security import generate_password_hash

import store
from server import app as flask_app, seed_data


@pytest.fixture
def app(tmp_path):
    previous = flask_app.config["DATA_DIR"]
    flask_app.config.update(TESTING=True, DATA_DIR=tmp_path)
    with flask_app.app_context():
        seed_data()
    yield flask_app
    flask_app.config["DATA_DIR"] = previous


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def write_data(app):
    def _write(name, records):
        store.save_records(store.data_path(app.config["DATA_DIR"], name), records)
    return _write


@pytest.fixture
def read_data(app):
    def _read(name):
        return store.load_records(store.data_path(app.config["DATA_DIR"], name))
    return _read


def _login(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}


@pytest.fixture
def admin_headers(app, client):
    return _login(client, app.config["ADMIN_EMAIL"], app.config["ADMIN_PASSWORD"])


@pytest.fixture
def artist(read_data, write_data):
    users = read_data("users")
    user = {
        "id": 2,
        "full_name": "Ada Artist",
        "email": "ada@example.com",
        "password": generate_password_hash("secret"),
        "role": "user",
        "status": "active",
    }
    write_data("users", users + [user])
    return user


@pytest.fixture
def user_headers(client, artist):
    return _login(client, artist["email"], "secret")


def make_artwork(id, **fields):
    record = {
        "id": id,
        "user_id": 2,
        "title": f"Artwork {id}",
        "description": "",
        "artist_name": "Ada Artist",
        "type": "painting",
        "period": "modern",
        "status": "approved",
        "location_notes": "",
        "created_at": "2024-01-01 00:00:00",
    }
    record.update(fields)
    return record
