"""
Unit tests for API routes
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from database.connection import DatabaseManager
from utils.exceptions import StorageUnavailable, ConstraintViolation


@pytest.mark.unit
class TestSystemRoutes:
    """Test cases for health and documentation endpoints"""

    def test_health_check_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["timestamp"].endswith("Z")

    def test_documentation_endpoint(self, client):
        response = client.get("/documentation")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Quotes API"
        assert data["version"] == "1.0.0"
        assert data["baseUrl"] == "https://quotes.example.com"
        assert set(data["endpoints"]["quotes"]) == {
            "getAllQuotes", "bulkImport", "getByLanguage", "getRandom", "addNew"
        }
        assert data["endpoints"]["quotes"]["getRandom"]["parameters"] == {"language": "fr|en"}
        quote_schema = data["schemas"]["Quote"]
        assert set(quote_schema["required"]) == {"quote", "author", "language"}
        assert quote_schema["properties"]["language"]["enum"] == ["fr", "en"]

    def test_documentation_base_url_outside_production(self, db_path, dev_config):
        app = create_app(db_manager=DatabaseManager(db_path), config=dev_config)
        with TestClient(app) as client:
            data = client.get("/documentation").json()
        assert data["baseUrl"] == "http://localhost:4000"

    def test_documentation_when_empty(self, client):
        """Structural endpoints answer even without any stored quote"""
        assert client.get("/documentation").status_code == 200


@pytest.mark.unit
class TestQuoteRoutes:
    """Test cases for quote endpoints"""

    def test_get_all_quotes_empty(self, client):
        response = client.get("/quotes")
        assert response.status_code == 404
        assert response.json() == {"message": "Aucune citation disponible / No quotes available"}

    def test_get_all_quotes(self, client, sample_quotes):
        client.post("/quotes", json=sample_quotes)

        response = client.get("/quotes")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert len(data["quotes"]) == 5
        assert [q["language"] for q in data["quotes"]] == ["en", "en", "en", "fr", "fr"]
        assert all("id" not in q for q in data["quotes"])

    def test_add_quote(self, client):
        response = client.post("/en/quote", json={"quote": "Stay hungry", "author": "Jobs"})
        assert response.status_code == 201
        assert response.json() == {
            "message": "Citation ajoutée avec succès / Quote added successfully",
            "quote": {"quote": "Stay hungry", "author": "Jobs", "language": "en"}
        }

    def test_add_quote_then_listed_by_author(self, client):
        client.post("/en/quote", json={"quote": "Stay hungry", "author": "Jobs"})
        client.post("/en/quote", json={"quote": "Think different", "author": "Apple"})

        response = client.get("/en/quotes")
        assert response.status_code == 200
        data = response.json()
        assert data["language"] == "en"
        assert data["total"] == 2
        assert data["quotes"] == [
            {"quote": "Think different", "author": "Apple", "language": "en"},
            {"quote": "Stay hungry", "author": "Jobs", "language": "en"},
        ]

    def test_language_ignored_in_body(self, client):
        """The path decides the language"""
        response = client.post("/fr/quote", json={"quote": "Q", "author": "A", "language": "en"})
        assert response.status_code == 201
        assert response.json()["quote"]["language"] == "fr"

    @pytest.mark.parametrize("body", [
        {"quote": "Q"},
        {"author": "A"},
        {"quote": "", "author": "A"},
        {},
        ["Q", "A"],
    ])
    def test_add_quote_missing_fields(self, client, body):
        response = client.post("/en/quote", json=body)
        assert response.status_code == 400
        assert response.json() == {
            "error": "Champs requis manquants / Missing required fields",
            "required": ["quote", "author"]
        }

    def test_add_quote_without_body(self, client):
        response = client.post("/en/quote")
        assert response.status_code == 400

    @pytest.mark.parametrize("method,path", [
        ("get", "/de/quotes"),
        ("get", "/de/quote"),
        ("post", "/de/quote"),
        ("get", "/EN/quotes"),
    ])
    def test_unsupported_language(self, client, method, path):
        kwargs = {"json": {"quote": "Q", "author": "A"}} if method == "post" else {}
        response = getattr(client, method)(path, **kwargs)
        assert response.status_code == 400
        assert response.json() == {"error": "Langue non supportée / Unsupported language"}

    def test_language_checked_before_body(self, client):
        response = client.post("/de/quote", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Langue non supportée / Unsupported language"

    def test_get_quotes_by_language_empty(self, client):
        client.post("/en/quote", json={"quote": "Q", "author": "A"})

        response = client.get("/fr/quotes")
        assert response.status_code == 404
        assert response.json() == {
            "message": "Aucune citation disponible en fr / No quotes available in fr"
        }

    def test_get_random_quote(self, client):
        client.post("/fr/quote", json={"quote": "Je pense, donc je suis", "author": "Descartes"})

        response = client.get("/fr/quote")
        assert response.status_code == 200
        assert response.json() == {
            "quote": "Je pense, donc je suis", "author": "Descartes", "language": "fr"
        }

    def test_get_random_quote_empty(self, client):
        response = client.get("/en/quote")
        assert response.status_code == 404
        assert "No quotes available in en" in response.json()["message"]

    def test_bulk_import(self, client, sample_quotes):
        response = client.post("/quotes", json=sample_quotes)
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "5 citations importées / quotes imported"
        }

    def test_bulk_import_invalid_language(self, client):
        response = client.post("/quotes", json=[{"quote": "Q1", "author": "A1", "language": "de"}])
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Format invalide / Invalid format"
        assert data["expected"]["type"] == "array"
        assert client.get("/quotes").status_code == 404

    @pytest.mark.parametrize("body", [{"quote": "Q", "author": "A", "language": "en"}, "text", None])
    def test_bulk_import_not_an_array(self, client, body):
        response = client.post("/quotes", json=body)
        assert response.status_code == 400

    def test_bulk_import_malformed_json(self, client):
        response = client.post(
            "/quotes", content="[{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Format invalide / Invalid format"}

    def test_bulk_import_transaction_failure(self, client, test_app):
        test_app.state.quote_ops.add_many_quotes = AsyncMock(
            return_value={"success": False, "error": "CHECK constraint failed: quotes"}
        )

        response = client.post("/quotes", json=[{"quote": "Q", "author": "A", "language": "en"}])
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Échec de l'import / Import failed",
            "error": "CHECK constraint failed: quotes"
        }


@pytest.mark.unit
class TestErrorHandling:
    """Test cases for error mapping"""

    def test_unknown_route(self, client):
        response = client.get("/does/not/exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Route non trouvée / Route not found"}

    def test_unsupported_method(self, client):
        response = client.delete("/quotes")
        assert response.status_code == 404
        assert response.json() == {"error": "Route non trouvée / Route not found"}

    def test_storage_unavailable(self, client, test_app):
        test_app.state.quote_ops.list_all = AsyncMock(
            side_effect=StorageUnavailable("Stockage indisponible / Storage unavailable")
        )

        response = client.get("/quotes")
        assert response.status_code == 500
        assert response.json() == {"error": "Erreur de stockage / Storage error"}

    def test_add_quote_constraint_violation(self, client, test_app):
        test_app.state.quote_ops.add_quote = AsyncMock(
            side_effect=ConstraintViolation("Constraint violation")
        )

        response = client.post("/en/quote", json={"quote": "Q", "author": "A"})
        assert response.status_code == 500
        assert "details" not in response.json()

    def test_storage_error_details_in_development(self, db_path, dev_config):
        app = create_app(db_manager=DatabaseManager(db_path), config=dev_config)
        with TestClient(app) as client:
            app.state.quote_ops.add_quote = AsyncMock(
                side_effect=ConstraintViolation("Constraint violation")
            )
            response = client.post("/en/quote", json={"quote": "Q", "author": "A"})

        assert response.status_code == 500
        assert response.json()["details"] == "Constraint violation"

    def test_unexpected_error_is_generic(self, test_app):
        with TestClient(test_app, raise_server_exceptions=False) as client:
            test_app.state.quote_ops.get_random = AsyncMock(side_effect=RuntimeError("disk on fire"))
            response = client.get("/en/quote")

        assert response.status_code == 500
        assert response.json() == {"error": "Erreur interne du serveur / Internal server error"}

    def test_unexpected_error_details_in_development(self, db_path, dev_config):
        app = create_app(db_manager=DatabaseManager(db_path), config=dev_config)
        with TestClient(app, raise_server_exceptions=False) as client:
            app.state.quote_ops.get_random = AsyncMock(side_effect=RuntimeError("disk on fire"))
            response = client.get("/en/quote")

        assert response.status_code == 500
        assert response.json()["details"] == "disk on fire"


@pytest.mark.unit
class TestCors:
    """Test cases for cross-origin headers"""

    def test_simple_request_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "http://example.org"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight_allows_get_and_post_only(self, client):
        response = client.options("/quotes", headers={
            "Origin": "http://example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type"
        })
        assert response.status_code == 200
        allowed = response.headers["access-control-allow-methods"]
        assert "GET" in allowed and "POST" in allowed
        assert "DELETE" not in allowed

    def test_preflight_rejects_other_methods(self, client):
        response = client.options("/quotes", headers={
            "Origin": "http://example.org",
            "Access-Control-Request-Method": "DELETE"
        })
        assert response.status_code == 400

    def test_process_time_header(self, client):
        response = client.get("/health")
        assert "x-process-time" in response.headers
