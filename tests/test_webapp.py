from fastapi.testclient import TestClient

from mini_analyzer import scan
from webapp.main import app
from webapp.report import count_tokens

client = TestClient(app)


def test_health():
	response = client.get("/health")
	assert response.status_code == 200
	assert response.json() == {"status": "ok"}


def test_index_page():
	response = client.get("/")
	assert response.status_code == 200
	assert "/api/analyze" in response.text


def test_analyze_declaration():
	response = client.post("/api/analyze", json={"source": "int a = 10;"})
	assert response.status_code == 200
	body = response.json()
	assert body["source"] == "int a = 10;"
	assert body["token_counts"] == {"reserved": 1, "identifier": 1, "number": 1, "symbol": 2, "error": 0, "total": 5}
	assert len(body["tokens"]) == 6
	assert body["tokens"][0] == {"kind": "RESERVED", "literal": "int", "line": 1, "column": 1, "category": "reserved"}
	assert body["tokens"][-1]["category"] == "eof"
	assert body["errors"] == []
	assert body["symbols"] == [{"name": "a", "type": "int", "value": None, "line": 0, "column": 0}]


def test_errors_are_tagged_syntax_first():
	response = client.post("/api/analyze", json={"source": "b = 1; @"})
	body = response.json()
	assert [e["origin"] for e in body["errors"]] == ["syntax", "semantic"]
	assert body["errors"][0]["message"] == "Unexpected token '@'"
	assert body["errors"][1]["message"] == "Variable 'b' used before declared"
	assert body["token_counts"]["error"] == 1


def test_missing_source_is_rejected():
	response = client.post("/api/analyze", json={})
	assert response.status_code == 422


def test_cors_preflight():
	response = client.options(
		"/api/analyze",
		headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
	)
	assert response.status_code == 200
	assert "access-control-allow-origin" in response.headers


def test_count_tokens_excludes_eof():
	counts = count_tokens(scan("do { x = x * 2; } while (x == 8); #"))
	assert counts.reserved == 2
	assert counts.identifier == 3
	assert counts.number == 2
	assert counts.symbol == 9
	assert counts.error == 1
	assert counts.total == 17
