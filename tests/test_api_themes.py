import pytest
from fastapi.testclient import TestClient

from themegen import main as main_mod
from themegen.errors import CompletionError, GenerationError, ParseError
from themegen.main import app, get_resolver
from themegen.resolver import ThemeResolver
from themegen.store import FileThemeStore


def _theme(name, bg="#0B0C10", **extra):
    doc = {
        "themeName": name,
        "advice": "For late-night dashboards.",
        "colors": {"canvasBackground": bg, "accent": "#66FCF1", "primaryInteractive": "#45A29E"},
    }
    doc.update(extra)
    return doc


@pytest.fixture
def client(tmp_path):
    resolver = ThemeResolver(FileThemeStore(tmp_path / "themes.json"), policy="reject")
    app.dependency_overrides[get_resolver] = lambda: resolver
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("x-request-id")


def test_llm_status_shape(client, monkeypatch):
    monkeypatch.setattr(main_mod.llm_client, "GEMINI_API_KEY", "")
    monkeypatch.setattr(main_mod.llm_client, "OPENROUTER_API_KEY", "")
    r = client.get("/llm/status")
    assert r.status_code == 200
    assert r.json() == {"provider": None, "model": None, "has_token": False}


def test_theme_crud_round(client):
    r = client.post("/api/themes", json=_theme("Neon Harbor"))
    assert r.status_code == 201
    saved = r.json()
    tid = saved["id"]
    assert saved["isDark"] is True
    assert saved["groupId"]

    r = client.get(f"/api/themes/{tid}")
    assert r.status_code == 200
    assert r.json()["themeName"] == "Neon Harbor"

    r = client.put(f"/api/themes/{tid}", json=_theme("Neon Harbor (Day)", bg="#F7F7F2"))
    assert r.status_code == 200
    assert r.json()["isDark"] is False
    assert r.json()["groupId"] == saved["groupId"]

    r = client.patch(f"/api/themes/{tid}", json={"themeName": "Harbor Light"})
    assert r.status_code == 200
    assert r.json()["themeName"] == "Harbor Light"

    r = client.delete(f"/api/themes/{tid}")
    assert r.status_code == 204
    assert client.get("/api/themes").json() == []


def test_duplicate_name_is_409(client):
    assert client.post("/api/themes", json=_theme("Forest")).status_code == 201
    r = client.post("/api/themes", json=_theme("Forest"))
    assert r.status_code == 409
    assert r.json() == {"error": "Theme name already exists", "code": "DUPLICATE_NAME", "themeName": "Forest"}


def test_missing_background_is_422(client):
    r = client.post("/api/themes", json={"themeName": "Empty", "colors": {}})
    assert r.status_code == 422
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_unknown_and_malformed_ids_are_404(client):
    for path in ("/api/themes/" + "0" * 32, "/api/themes/not-an-id"):
        assert client.get(path).status_code == 404
        assert client.delete(path).status_code == 404
        r = client.put(path, json=_theme("Ghost"))
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"


def test_list_is_sorted(client):
    for name in ("Zen", "🌊 Ocean", "apple"):
        client.post("/api/themes", json=_theme(name))
    names = [t["themeName"] for t in client.get("/api/themes").json()]
    assert names == ["apple", "🌊 Ocean", "Zen"]


def test_theme_css(client):
    tid = client.post("/api/themes", json=_theme("Neon Harbor")).json()["id"]
    r = client.get(f"/api/themes/{tid}/css")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/css")
    assert "--main-bg: #0B0C10;" in r.text
    assert "color-scheme: dark;" in r.text


def test_generate_theme_endpoint(client, monkeypatch):
    captured = {}

    def fake_generate(prompt):
        captured["prompt"] = prompt
        return {"themeName": "Glacier", "isDark": False, "colors": {"canvasBackground": "#EEF6FF"}}

    monkeypatch.setattr(main_mod.generator, "generate_theme", fake_generate)
    r = client.post("/api/generate-theme", json={"prompt": "  icy morning  "})
    assert r.status_code == 200
    assert r.json()["themeName"] == "Glacier"
    assert captured["prompt"] == "icy morning"


def test_generate_theme_requires_prompt(client):
    r = client.post("/api/generate-theme", json={"prompt": "   "})
    assert r.status_code == 400


def test_generation_failure_is_502(client, monkeypatch):
    def failing(prompt):
        try:
            raise ParseError("no JSON object found")
        except ParseError as exc:
            raise GenerationError("Bad AI response", "garbage") from exc

    monkeypatch.setattr(main_mod.generator, "generate_theme", failing)
    r = client.post("/api/generate-theme", json={"prompt": "x"})
    assert r.status_code == 502
    assert r.json() == {"error": "Bad AI response", "code": "GENERATION_FAILED", "detail": "no JSON object found"}


def test_completion_failure_is_502(client, monkeypatch):
    def failing(prompt):
        raise CompletionError("Missing LLM credentials")

    monkeypatch.setattr(main_mod.generator, "generate_theme", failing)
    r = client.post("/api/generate-theme", json={"prompt": "x"})
    assert r.status_code == 502
    assert r.json()["code"] == "COMPLETION_FAILED"


def test_invert_and_revise_endpoints(client, monkeypatch):
    monkeypatch.setattr(
        main_mod.generator, "invert_theme", lambda theme: dict(theme, isDark=not theme.get("isDark"))
    )
    monkeypatch.setattr(
        main_mod.generator, "revise_theme", lambda theme, instruction: dict(theme, advice=instruction)
    )
    current = _theme("Harbor", isDark=True, groupId="g1")
    r = client.post("/api/invert-theme", json={"currentTheme": current})
    assert r.status_code == 200
    assert r.json()["isDark"] is False

    r = client.post("/api/revise-theme", json={"currentTheme": current, "instruction": "warmer"})
    assert r.status_code == 200
    assert r.json()["advice"] == "warmer"

    r = client.post("/api/revise-theme", json={"currentTheme": current, "instruction": " "})
    assert r.status_code == 400


def test_validate_success(client):
    r = client.post("/api/validate", json={"theme": _theme("Valid", isDark=True)})
    assert r.status_code == 200
    assert r.json() == {"detail": {"valid": True}}


def test_validate_failure(client):
    bad = {"themeName": "", "isDark": "yes", "colors": {"accent": "teal"}}
    r = client.post("/api/validate", json={"theme": bad})
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert detail["valid"] is False
    paths = {e["path"] for e in detail["errors"]}
    assert {"themeName", "isDark", "colors", "colors.accent"} <= paths
