from es_importer import Settings


def test_defaults(monkeypatch):
    for name in ("ES_URL", "ES_API_KEY", "ES_TIMEOUT", "ES_MAX_RETRIES", "ES_REFRESH", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.es_url == "http://localhost:9200"
    assert settings.api_key is None
    assert settings.timeout == 30.0
    assert settings.refresh is False
    assert settings.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("ES_URL", "https://search.internal:9243/")
    monkeypatch.setenv("ES_API_KEY", "abc")
    monkeypatch.setenv("ES_TIMEOUT", "5")
    monkeypatch.setenv("ES_MAX_RETRIES", "-4")
    monkeypatch.setenv("ES_REFRESH", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.es_url == "https://search.internal:9243"
    assert settings.api_key == "abc"
    assert settings.timeout == 5.0
    assert settings.max_retries == 0
    assert settings.refresh is True
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("ES_TIMEOUT", "soon")
    monkeypatch.setenv("ES_MAX_RETRIES", "many")
    settings = Settings.from_env()
    assert settings.timeout == 30.0
    assert settings.max_retries == 3
