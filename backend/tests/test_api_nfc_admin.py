from conftest import login


def test_admin_routes_require_admin(user_client, client):
    assert user_client.get("/api/admin/tags").status_code == 403
    assert user_client.post("/api/admin/verify-tag", json={"tagId": "T"}).status_code == 403
    assert user_client.get("/api/admin/users").status_code == 403

    user_client.post("/api/auth/logout")
    assert client.get("/api/admin/tags").status_code == 401


def test_verify_check_and_list(admin_client, make_client):
    resp = admin_client.post("/api/admin/verify-tag", json={"tagId": "TAG1"})
    assert resp.status_code == 200
    assert resp.json()["isVerified"] is True
    assert resp.json()["verifiedBy"] == "admin@example.com"

    anon = make_client()
    assert anon.get("/api/nfc/check/TAG1").json() == {"isVerified": True}
    assert anon.get("/api/nfc/check/UNKNOWN").json() == {"isVerified": False}

    tags = admin_client.get("/api/admin/tags").json()
    assert [t["tagId"] for t in tags] == ["TAG1"]
    assert admin_client.get("/api/admin/tags/TAG1").json()["tagId"] == "TAG1"
    assert admin_client.get("/api/admin/tags/NOPE").status_code == 404


def test_verify_tag_requires_tag_id(admin_client):
    resp = admin_client.post("/api/admin/verify-tag", json={})
    assert resp.status_code == 400
    assert "tagId" in resp.json()["message"]


def test_claim_flow(admin_client, make_client):
    admin_client.post("/api/admin/verify-tag", json={"tagId": "TAG1"})

    alice = make_client()
    alice_user = login(alice, "alice")
    resp = alice.post("/api/nfc/claim", json={"tagId": "TAG1"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["tag"]["claimedBy"] == alice_user["id"]
    assert alice.get("/api/nfc/me").json()["tagId"] == "TAG1"

    bob = make_client()
    login(bob, "bob")
    resp = bob.post("/api/nfc/claim", json={"tagId": "TAG1"})
    assert resp.status_code == 400
    assert "message" in resp.json()
    assert bob.get("/api/nfc/me").status_code == 404

    assert admin_client.get("/api/admin/tags/TAG1").json()["claimedBy"] == alice_user["id"]


def test_claim_unverified_tag(user_client):
    resp = user_client.post("/api/nfc/claim", json={"tagId": "GHOST"})
    assert resp.status_code == 400


def test_claim_requires_session(client):
    assert client.post("/api/nfc/claim", json={"tagId": "TAG1"}).status_code == 401


def test_activation(admin_client, make_client):
    owner = make_client()
    user = login(owner, "alice")
    owner.get("/api/profiles/me")

    users = admin_client.get("/api/admin/users").json()
    assert {u["username"] for u in users} == {"root", "alice"}

    resp = admin_client.post(f"/api/admin/activate/{user['id']}")
    assert resp.status_code == 200
    assert resp.json()["isActivated"] is True
    assert resp.json()["activatedBy"] == "admin@example.com"

    assert owner.get("/api/public/profiles/alice").json()["isActivated"] is True
    assert admin_client.post("/api/admin/activate/9999").status_code == 404
