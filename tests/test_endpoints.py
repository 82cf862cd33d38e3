"""Tests for all API endpoints, run against both store backends."""
from datetime import datetime

import pytest

from string_analyzer.identifier import compute_identifier


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestCreateStringEndpoint:
    """Tests for POST /strings."""

    def test_create_string_success(self, client):
        response = client.post("/strings", json={"value": "Hello World"})
        assert response.status_code == 201
        data = response.json()
        assert data["value"] == "Hello World"
        assert data["id"] == compute_identifier("Hello World")
        assert data["properties"] == {
            "length": 11,
            "is_palindrome": False,
            "unique_characters": 8,
            "word_count": 2,
            "sha256_hash": compute_identifier("Hello World"),
            "character_frequency_map": {"H": 1, "e": 1, "l": 3, "o": 2, " ": 1, "W": 1, "r": 1, "d": 1},
        }
        created_at = datetime.fromisoformat(data["created_at"].replace("Z", "+00:00"))
        assert created_at.tzinfo is not None

    def test_create_exact_duplicate_conflict(self, client):
        first = client.post("/strings", json={"value": "Test String"})
        response_dup = client.post("/strings", json={"value": "Test String"})
        assert response_dup.status_code == 409
        body = response_dup.json()
        assert body["error"] == "String already exists"
        assert body["details"]["id"] == first.json()["id"]
        # case-variant allowed
        response_case = client.post("/strings", json={"value": "test string"})
        assert response_case.status_code == 201

    def test_create_empty_string(self, client):
        response = client.post("/strings", json={"value": ""})
        assert response.status_code == 201
        props = response.json()["properties"]
        assert props["length"] == 0
        assert props["word_count"] == 0
        assert props["is_palindrome"] is True

    def test_create_missing_value(self, client):
        response = client.post("/strings", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_create_wrong_type(self, client):
        response = client.post("/strings", json={"value": 123})
        assert response.status_code == 422

    def test_create_invalid_json_body(self, client):
        response = client.post(
            "/strings",
            content=b'{"value": "oops"',  # truncated JSON
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_create_lone_surrogate_rejected(self, client):
        response = client.post(
            "/strings",
            content=b'{"value": "\\ud800"}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["details"][0]["loc"] == ["body", "value"]
        assert "input" not in body["details"][0]
        assert client.get("/strings").json()["count"] == 0

    def test_create_astral_characters(self, client):
        response = client.post("/strings", json={"value": "\U0001F600x"})
        assert response.status_code == 201
        assert response.json()["properties"]["length"] == 2


class TestGetStringEndpoint:
    """Tests for GET /strings/{string_value}."""

    def test_get_string_success(self, client):
        client.post("/strings", json={"value": "test string"})
        response = client.get("/strings/test string")
        assert response.status_code == 200
        assert response.json()["value"] == "test string"

    def test_get_string_not_found(self, client):
        response = client.get("/strings/nonexistent_value")
        assert response.status_code == 404
        assert response.json()["error"] == "String not found"

    def test_get_string_preserves_created_at(self, client):
        created_at_1 = client.post("/strings", json={"value": "test"}).json()["created_at"]
        get_response = client.get("/strings/test")
        assert get_response.status_code == 200
        assert get_response.json()["created_at"] == created_at_1


class TestGetAllStringsEndpoint:
    """Tests for GET /strings with filtering."""

    @pytest.fixture(autouse=True)
    def seed(self, client):
        for v in ("hello", "racecar", "hello world", "a"):
            client.post("/strings", json={"value": v})

    def test_get_all_strings(self, client):
        data = client.get("/strings").json()
        assert data["count"] == 4
        assert len(data["data"]) == 4
        assert data["filters_applied"] == {}
        assert "interpreted_query" not in data

    @pytest.mark.parametrize(
        "params,count",
        [
            ("is_palindrome=true", 2),
            ("is_palindrome=false", 2),
            ("min_length=5", 3),
            ("max_length=5", 2),
            ("word_count=1", 3),
            ("contains_character=a", 2),
            ("contains_character=A", 2),
            ("is_palindrome=true&min_length=1&max_length=10", 2),
            ("min_length=10&max_length=5", 0),
            ("min_length=99999999999999999999", 0),
            ("max_length=99999999999999999999", 4),
        ],
    )
    def test_filters(self, client, params, count):
        response = client.get(f"/strings?{params}")
        assert response.status_code == 200
        assert response.json()["count"] == count

    def test_filters_applied_echo(self, client):
        data = client.get("/strings?is_palindrome=true&contains_character=R").json()
        assert data["filters_applied"] == {"is_palindrome": True, "contains_character": "r"}
        assert [d["value"] for d in data["data"]] == ["racecar"]

    @pytest.mark.parametrize(
        "params",
        [
            "min_length=-1",
            "max_length=-1",
            "word_count=-1",
            "contains_character=abc",
            "is_palindrome=maybe",
            "min_length=ten",
        ],
    )
    def test_invalid_params(self, client, params):
        response = client.get(f"/strings?{params}")
        assert response.status_code == 400
        assert "error" in response.json()


class TestFilterByNaturalLanguageEndpoint:
    """Tests for GET /strings/filter-by-natural-language."""

    @pytest.fixture(autouse=True)
    def seed(self, client):
        for v in ("a", "racecar", "hello world", "level"):
            client.post("/strings", json={"value": v})

    def nl(self, client, query):
        return client.get("/strings/filter-by-natural-language", params={"query": query})

    def test_single_word_palindromes(self, client):
        response = self.nl(client, "single word palindromes")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert data["interpreted_query"] == {
            "original": "single word palindromes",
            "parsed_filters": {"word_count": 1, "is_palindrome": True},
        }
        assert "filters_applied" not in data

    def test_strings_longer_than(self, client):
        data = self.nl(client, "strings longer than 10 characters").json()
        assert data["count"] == 1
        assert data["interpreted_query"]["parsed_filters"] == {"min_length": 11}

    def test_strings_containing_character(self, client):
        assert self.nl(client, "strings containing the letter a").json()["count"] == 2

    def test_contain_the_first_vowel(self, client):
        data = self.nl(client, "strings that contain the first vowel").json()
        # 'a' and 'racecar'
        assert data["count"] == 2
        assert data["interpreted_query"]["parsed_filters"] == {"contains_character": "a"}

    def test_unparseable_query(self, client):
        response = self.nl(client, "banana")
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Unable to parse natural language query"
        assert body["details"] == {"query": "banana"}

    def test_blank_query(self, client):
        assert self.nl(client, "   ").status_code == 400

    def test_missing_query_param_results_in_400(self, client):
        response = client.get("/strings/filter-by-natural-language")
        assert response.status_code == 400

    def test_matches_equivalent_explicit_query(self, client):
        nl = self.nl(client, "palindromic strings longer than 1").json()
        explicit = client.get("/strings?is_palindrome=true&min_length=2").json()
        assert nl["data"] == explicit["data"]


class TestDeleteStringEndpoint:
    """Tests for DELETE /strings/{string_value}."""

    def test_delete_string_success(self, client):
        client.post("/strings", json={"value": "to delete"})
        assert client.get("/strings/to delete").status_code == 200
        delete_response = client.delete("/strings/to delete")
        assert delete_response.status_code == 204
        assert delete_response.content == b""
        assert client.get("/strings/to delete").status_code == 404

    def test_delete_nonexistent_string(self, client):
        response = client.delete("/strings/nonexistent_value")
        assert response.status_code == 404

    def test_delete_string_not_in_get_all(self, client):
        client.post("/strings", json={"value": "string1"})
        client.post("/strings", json={"value": "string2"})
        assert client.get("/strings").json()["count"] == 2
        client.delete("/strings/string2")
        assert client.get("/strings").json()["count"] == 1


def test_unknown_route_uses_error_shape(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
