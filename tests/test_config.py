from __future__ import annotations

from webrag.config import Settings


def test_defaults_without_env_file():
    s = Settings(_env_file=None)

    assert s.search_engine == "duckduckgo"
    assert s.web_timeout_ms == 15000
    assert s.web_retry_attempts == 3
    assert s.enrichment_min_sources == 3
    assert s.enrichment_max_variants == 4
    assert s.include_domain_list == []


def test_domain_lists_are_trimmed_and_lowercased():
    s = Settings(_env_file=None, web_include_domains=" Python.org, ,docs.rs ")

    assert s.include_domain_list == ["python.org", "docs.rs"]


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("WEB_MAX_RESULTS", "4")
    monkeypatch.setenv("OLLAMA_MODEL", "mistral:latest")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    s = Settings(_env_file=None)

    assert s.web_max_results == 4
    assert s.ollama_model == "mistral:latest"
    assert s.cors_origin_list == ["http://a.test", "http://b.test"]
