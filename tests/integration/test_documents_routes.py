"""Integration tests for document CRUD, upload and download."""

import asyncio

from fastapi.testclient import TestClient

from docmanager.documents import routes, service
from docmanager.uploads.storage import FileStorage


def _create(client: TestClient, headers, **body):
    body.setdefault("title", "Quarterly report")
    resp = client.post("/documents", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _upload(client: TestClient, headers, content: bytes = b"hello world", **form):
    form.setdefault("title", "Notes")
    return client.post(
        "/documents/upload",
        headers=headers,
        data=form,
        files={"file": ("notes.txt", content, "text/plain")},
    )


def test_create_document_with_tags(client: TestClient, alice) -> None:
    """Test metadata-only creation reconciles tags and reports the owner."""
    user, headers = alice

    doc = _create(client, headers, category="finance", documentDate="2024-03-31", tags=["Q1", " q1 ", "Tax"])

    assert doc["tags"] == ["q1", "tax"]
    assert doc["category"] == "finance"
    assert doc["documentDate"] == "2024-03-31"
    assert doc["filePath"] is None
    assert doc["user"] == {"id": user.id, "username": "alice", "fullName": "Alice Liddell"}


def test_list_is_scoped_to_owner(client: TestClient, alice, bob) -> None:
    """Test users only list their own documents, newest first."""
    _, alice_headers = alice
    _, bob_headers = bob
    first = _create(client, alice_headers, title="First", category="a")
    second = _create(client, alice_headers, title="Second", category="b")
    _create(client, bob_headers, title="Bob's")

    listed = client.get("/documents", headers=alice_headers).json()
    assert [d["id"] for d in listed] == [second["id"], first["id"]]

    filtered = client.get("/documents?category=a", headers=alice_headers).json()
    assert [d["id"] for d in filtered] == [first["id"]]

    assert client.get("/documents/stats", headers=alice_headers).json() == {"totalDocuments": 2}


def test_foreign_document_is_not_found(client: TestClient, alice, bob, admin) -> None:
    """Test another user's document looks missing, but admins can read it."""
    _, alice_headers = alice
    _, bob_headers = bob
    _, admin_headers = admin
    doc = _create(client, alice_headers)

    for method, path in (
        ("get", f"/documents/{doc['id']}"),
        ("get", f"/documents/{doc['id']}/download"),
        ("delete", f"/documents/{doc['id']}"),
    ):
        resp = client.request(method, path, headers=bob_headers)
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "not_found"

    resp = client.put(f"/documents/{doc['id']}", json={"title": "Hijacked"}, headers=bob_headers)
    assert resp.status_code == 404

    assert client.get(f"/documents/{doc['id']}", headers=admin_headers).status_code == 200


def test_anonymous_access_is_401(client: TestClient) -> None:
    """Test document endpoints need authentication."""
    assert client.get("/documents").status_code == 401
    assert client.get("/documents/1").status_code == 401


def test_update_document(client: TestClient, alice) -> None:
    """Test partial updates; omitted tags are kept, an empty list clears them."""
    _, headers = alice
    doc = _create(client, headers, category="old", tags=["keep"])

    updated = client.put(f"/documents/{doc['id']}", json={"category": "new"}, headers=headers).json()
    assert updated["category"] == "new"
    assert updated["title"] == doc["title"]
    assert updated["tags"] == ["keep"]

    retagged = client.put(f"/documents/{doc['id']}", json={"tags": ["Fresh"]}, headers=headers).json()
    assert retagged["tags"] == ["fresh"]

    cleared = client.put(f"/documents/{doc['id']}", json={"tags": []}, headers=headers).json()
    assert cleared["tags"] == []


def test_search_titles(client: TestClient, alice, bob, admin) -> None:
    """Test search is case-insensitive and scoped unless the caller is admin."""
    _, alice_headers = alice
    _, bob_headers = bob
    _, admin_headers = admin
    _create(client, alice_headers, title="Electricity Bill")
    _create(client, bob_headers, title="Water bill")

    mine = client.get("/documents/search?query=BILL", headers=alice_headers).json()
    everyone = client.get("/documents/search?query=bill", headers=admin_headers).json()

    assert [d["title"] for d in mine] == ["Electricity Bill"]
    assert sorted(d["title"] for d in everyone) == ["Electricity Bill", "Water bill"]


def test_upload_and_download(client: TestClient, alice, storage: FileStorage) -> None:
    """Test an upload stores the file, extracts text and can be downloaded."""
    _, headers = alice

    resp = _upload(client, headers, content=b"Invoice   total 42", tags="Bills, home ,")
    assert resp.status_code == 201, resp.text
    doc = resp.json()

    assert doc["fileType"] == "text/plain"
    assert doc["fileSize"] == len(b"Invoice   total 42")
    assert doc["extractedText"] == "Invoice total 42"
    assert doc["tags"] == ["bills", "home"]
    assert doc["filePath"] != "notes.txt"
    assert storage.exists(doc["filePath"])

    download = client.get(f"/documents/{doc['id']}/download", headers=headers)
    assert download.status_code == 200
    assert download.content == b"Invoice   total 42"
    assert download.headers["content-type"].startswith("text/plain")
    assert "Notes" in download.headers["content-disposition"]


def test_upload_rejects_empty_and_oversized(client: TestClient, alice, storage: FileStorage) -> None:
    """Test empty files are 400 and files over the limit are 413, nothing stored."""
    _, headers = alice

    empty = _upload(client, headers, content=b"")
    assert empty.status_code == 400
    assert empty.json()["detail"]["error"] == "validation_error"

    too_big = _upload(client, headers, content=b"x" * (1024 * 1024 + 1))
    assert too_big.status_code == 413

    assert list(storage.root.iterdir()) == []
    assert client.get("/documents", headers=headers).json() == []


def test_upload_requires_title(client: TestClient, alice) -> None:
    """Test the title form field is mandatory."""
    _, headers = alice

    resp = client.post("/documents/upload", headers=headers, files={"file": ("a.txt", b"a", "text/plain")})

    assert resp.status_code == 400


def test_failed_record_removes_stored_file(client: TestClient, alice, storage: FileStorage, monkeypatch) -> None:
    """Test no file is left behind when the record cannot be saved."""
    _, headers = alice

    def _boom(*args, **kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(service, "create_document", _boom)
    client_no_raise = TestClient(client.app, raise_server_exceptions=False)

    resp = _upload(client_no_raise, headers)

    assert resp.status_code == 500
    assert list(storage.root.iterdir()) == []


def test_delete_removes_file(client: TestClient, alice, storage: FileStorage) -> None:
    """Test deleting a document deletes its stored file."""
    _, headers = alice
    doc = _upload(client, headers).json()

    assert client.delete(f"/documents/{doc['id']}", headers=headers).status_code == 204

    assert not storage.exists(doc["filePath"])
    assert client.get(f"/documents/{doc['id']}", headers=headers).status_code == 404


def test_download_without_file(client: TestClient, alice, storage: FileStorage) -> None:
    """Test metadata-only documents and vanished files are 404 on download."""
    _, headers = alice
    bare = _create(client, headers)
    uploaded = _upload(client, headers).json()
    storage.delete(uploaded["filePath"])

    assert client.get(f"/documents/{bare['id']}/download", headers=headers).status_code == 404
    assert client.get(f"/documents/{uploaded['id']}/download", headers=headers).status_code == 404


def test_reassign_owner(client: TestClient, alice, bob, admin) -> None:
    """Test only admins can move a document to another user."""
    _, alice_headers = alice
    bob_user, bob_headers = bob
    _, admin_headers = admin
    doc = _create(client, alice_headers)

    denied = client.put(f"/documents/{doc['id']}/owner", json={"userId": bob_user.id}, headers=alice_headers)
    assert denied.status_code == 403

    missing_user = client.put(f"/documents/{doc['id']}/owner", json={"userId": 9999}, headers=admin_headers)
    assert missing_user.status_code == 404

    moved = client.put(f"/documents/{doc['id']}/owner", json={"userId": bob_user.id}, headers=admin_headers)
    assert moved.status_code == 200
    assert moved.json()["user"]["username"] == "bob"

    assert client.get(f"/documents/{doc['id']}", headers=bob_headers).status_code == 200
    assert client.get(f"/documents/{doc['id']}", headers=alice_headers).status_code == 404


def test_tag_names_over_limit_rejected(client: TestClient, alice, storage: FileStorage) -> None:
    """Test a tag longer than 100 characters is a 400 on create, update and upload."""
    _, headers = alice
    long_tag = "x" * 101

    created = client.post("/documents", json={"title": "T", "tags": ["ok", long_tag]}, headers=headers)
    assert created.status_code == 400
    assert created.json()["detail"]["error"] == "validation_error"

    doc = _create(client, headers, tags=["  " + "a" * 100 + " "])
    assert doc["tags"] == ["a" * 100]

    updated = client.put(f"/documents/{doc['id']}", json={"tags": [long_tag]}, headers=headers)
    assert updated.status_code == 400
    assert client.get(f"/documents/{doc['id']}", headers=headers).json()["tags"] == ["a" * 100]

    uploaded = _upload(client, headers, tags=f"ok, {long_tag}")
    assert uploaded.status_code == 400
    assert uploaded.json()["detail"]["error"] == "validation_error"
    assert list(storage.root.iterdir()) == []


def test_upload_extracts_and_stores_off_the_event_loop(client: TestClient, alice, monkeypatch) -> None:
    """Test extraction and storage run in a worker thread, not on the event loop."""
    _, headers = alice
    seen = []

    def _extract(data, content_type, filename):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            seen.append("worker")
        else:
            seen.append("loop")
        return "text"

    monkeypatch.setattr(routes, "extract_text", _extract)

    resp = _upload(client, headers)

    assert resp.status_code == 201, resp.text
    assert resp.json()["extractedText"] == "text"
    assert seen == ["worker"]


def test_declared_content_type_is_not_trusted(client: TestClient, alice) -> None:
    """Test the stored and served content type comes from the file, not the client."""
    _, headers = alice

    resp = client.post(
        "/documents/upload",
        headers=headers,
        data={"title": "Report"},
        files={"file": ("report.txt", b"plain words", "application/x-evil")},
    )
    assert resp.status_code == 201, resp.text
    doc = resp.json()
    assert doc["fileType"] == "text/plain"

    download = client.get(f"/documents/{doc['id']}/download", headers=headers)
    assert download.headers["content-type"].startswith("text/plain")
