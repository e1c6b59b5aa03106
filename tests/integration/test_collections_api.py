"""
Integration tests for the collections API routes.
"""
import pytest

from docstore import __version__
from docstore.storage.errors import StoreIOError
from docstore.storage.json_store import JsonStore


@pytest.mark.integration
class TestCollectionsAPIRoutes:
    """Integration tests for /api/collections endpoints."""

    def test_version(self, client):
        """Test GET /api/version."""
        response = client.get('/api/version')

        assert response.status_code == 200
        assert response.get_json() == {"version": __version__}

    def test_put_then_get_record(self, client, temp_data_dir):
        """Test PUT followed by GET of the same record."""
        user = {"Name": "John", "Age": "23", "Company": "samsung"}

        response = client.put('/api/collections/users/John', json=user)

        assert response.status_code == 200
        assert response.get_json() == user
        assert (temp_data_dir / "users" / "John.json").exists()

        response = client.get('/api/collections/users/John')
        assert response.status_code == 200
        assert response.get_json() == user

    def test_get_record_with_suffix(self, client):
        """Test that GET accepts the .json form of the name."""
        client.put('/api/collections/users/John', json={"Name": "John"})

        response = client.get('/api/collections/users/John.json')

        assert response.status_code == 200
        assert response.get_json()["Name"] == "John"

    def test_get_missing_record(self, client):
        """Test GET of an absent record returns 404."""
        response = client.get('/api/collections/users/ghost')

        assert response.status_code == 404
        assert "error" in response.get_json()

    def test_list_collection(self, client):
        """Test GET /api/collections/<collection> returns parsed records."""
        client.put('/api/collections/users/John', json={"Name": "John"})
        client.put('/api/collections/users/paul', json={"Name": "paul"})

        response = client.get('/api/collections/users')

        assert response.status_code == 200
        data = response.get_json()
        assert [d["Name"] for d in data] == ["John", "paul"]

    def test_list_missing_collection(self, client):
        """Test GET of an absent collection returns 404."""
        response = client.get('/api/collections/missing-collection')

        assert response.status_code == 404

    def test_list_collection_with_invalid_record(self, client, temp_data_dir):
        """Test that a non-JSON file in a collection yields 422."""
        client.put('/api/collections/users/John', json={"Name": "John"})
        (temp_data_dir / "users" / "notes.txt").write_text("not json", encoding="utf-8")

        response = client.get('/api/collections/users')

        assert response.status_code == 422

    def test_get_invalid_record(self, client, temp_data_dir):
        """Test that a corrupt record yields 422."""
        (temp_data_dir / "users").mkdir()
        (temp_data_dir / "users" / "broken.json").write_text("{oops", encoding="utf-8")

        response = client.get('/api/collections/users/broken')

        assert response.status_code == 422

    def test_put_requires_json_body(self, client):
        """Test that PUT without a JSON body returns 400."""
        response = client.put('/api/collections/users/John', data="plain text")

        assert response.status_code == 400
        assert response.get_json()["error"] == "Request body must be JSON"

    def test_put_unencodable_text(self, client, temp_data_dir):
        """Test that a lone surrogate in the body is rejected with 400 and nothing is left behind."""
        response = client.put(
            '/api/collections/users/John',
            data='{"Name": "\\ud800"}',
            content_type='application/json',
        )

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert not (temp_data_dir / "users").exists()

    def test_delete_record(self, client):
        """Test DELETE removes the record."""
        client.put('/api/collections/users/John', json={"Name": "John"})

        response = client.delete('/api/collections/users/John')

        assert response.status_code == 204
        assert client.get('/api/collections/users/John').status_code == 404

    def test_delete_missing_record(self, client):
        """Test DELETE of an absent record returns 404."""
        response = client.delete('/api/collections/users/ghost')

        assert response.status_code == 404

    def test_store_failure_returns_500(self, client, mocker):
        """Test that filesystem failures map to 500."""
        mocker.patch.object(JsonStore, "write", side_effect=StoreIOError("disk full"))

        response = client.put('/api/collections/users/John', json={"Name": "John"})

        assert response.status_code == 500
        assert response.get_json() == {"error": "disk full"}

    def test_app_store_uses_configured_data_dir(self, app, temp_data_dir):
        """Test that the store attached to the app lives under DATA_DIR."""
        store = app.extensions["docstore"]

        assert isinstance(store, JsonStore)
        assert store.data_dir == temp_data_dir
        assert store.logger is app.logger
