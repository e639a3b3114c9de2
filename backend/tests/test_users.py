class TestProfile:
    def test_update_profile(self, client, make_user):
        user = make_user("alice")
        r = client.put("/api/users/me", json={
            "address": "1 Silom Rd",
            "latitude": 13.72,
            "longitude": 100.53,
        }, headers=user["headers"])
        assert r.status_code == 200
        data = r.json()
        assert data["address"] == "1 Silom Rd"
        assert data["latitude"] == 13.72
        assert data["firstname"] == "Alice"  # untouched

    def test_update_email_conflict(self, client, make_user):
        make_user("alice")
        bob = make_user("bob")
        r = client.put("/api/users/me", json={"email": "alice@example.com"}, headers=bob["headers"])
        assert r.status_code == 409

    def test_null_for_required_field_rejected(self, client, make_user):
        alice = make_user("alice")
        for field in ("firstname", "lastname", "email"):
            r = client.put("/api/users/me", json={field: None}, headers=alice["headers"])
            assert r.status_code == 422, field

        r = client.get("/api/auth/me", headers=alice["headers"])
        assert r.json()["firstname"] == "Alice"

    def test_null_clears_optional_field(self, client, make_user):
        alice = make_user("alice")
        client.put("/api/users/me", json={"address": "1 Silom Rd"}, headers=alice["headers"])
        r = client.put("/api/users/me", json={"address": None}, headers=alice["headers"])
        assert r.status_code == 200
        assert r.json()["address"] is None

    def test_get_public_profile(self, client, make_user):
        alice = make_user("alice")
        bob = make_user("bob")
        r = client.get(f"/api/users/{alice['id']}", headers=bob["headers"])
        assert r.status_code == 200
        data = r.json()
        assert data["username"] == "alice"
        assert "email" not in data

    def test_get_missing_user(self, client, make_user):
        alice = make_user("alice")
        r = client.get("/api/users/9999", headers=alice["headers"])
        assert r.status_code == 404


class TestAvatar:
    def _upload(self, client, user, name="me.png"):
        r = client.post(
            "/api/files",
            files={"file": (name, f"png-bytes-{name}".encode(), "image/png")},
            data={"file_type": "avatar"},
            headers=user["headers"],
        )
        assert r.status_code == 201, r.text
        return r.json()["id"]

    def test_set_and_clear_avatar(self, client, make_user):
        alice = make_user("alice")
        file_id = self._upload(client, alice)

        r = client.put("/api/users/me/avatar", json={"file_id": file_id}, headers=alice["headers"])
        assert r.status_code == 200
        assert r.json()["avatar_file"]["id"] == file_id

        r = client.put("/api/users/me/avatar", json={"file_id": None}, headers=alice["headers"])
        assert r.status_code == 200
        assert r.json()["avatar_file"] is None

    def test_cannot_use_someone_elses_file(self, client, make_user):
        alice = make_user("alice")
        bob = make_user("bob")
        file_id = self._upload(client, alice)

        r = client.put("/api/users/me/avatar", json={"file_id": file_id}, headers=bob["headers"])
        assert r.status_code == 403

    def test_missing_file(self, client, make_user):
        alice = make_user("alice")
        r = client.put("/api/users/me/avatar", json={"file_id": 424242}, headers=alice["headers"])
        assert r.status_code == 404

    def test_deleting_avatar_file_clears_reference(self, client, make_user):
        alice = make_user("alice")
        file_id = self._upload(client, alice)
        client.put("/api/users/me/avatar", json={"file_id": file_id}, headers=alice["headers"])

        r = client.delete(f"/api/files/{file_id}", headers=alice["headers"])
        assert r.status_code == 200

        r = client.get("/api/auth/me", headers=alice["headers"])
        assert r.json()["avatar_file"] is None
