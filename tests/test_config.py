from airbuddy.config import DEFAULT_LOCATION, Settings

ENV_VARS = ["AQI_API_KEY", "LOCATIONIQ_API_KEY", "PORT", "ENVIRONMENT", "WAQI_BASE_URL",
            "LOCATIONIQ_BASE_URL", "HTTP_TIMEOUT", "DEFAULT_LOCATION"]


def _clear(monkeypatch):
    # setenv first so teardown also removes whatever .env loading adds
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    settings = Settings.from_env()
    assert settings.aqi_api_key is None
    assert settings.port == 3000
    assert settings.waqi_base_url == "https://api.waqi.info"
    assert settings.default_location == DEFAULT_LOCATION


def test_reads_environment(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AQI_API_KEY", "abc")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
    settings = Settings.from_env()
    assert settings.aqi_api_key == "abc"
    assert settings.port == 8080
    assert settings.http_timeout == 2.5


def test_empty_key_is_unset(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOCATIONIQ_API_KEY", "")
    assert Settings.from_env().locationiq_api_key is None


def test_dotenv_read_from_working_directory(monkeypatch, tmp_path):
    _clear(monkeypatch)
    (tmp_path / ".env").write_text("AQI_API_KEY=from-dotenv\nPORT=4000\n")
    monkeypatch.chdir(tmp_path)
    settings = Settings.from_env()
    assert settings.aqi_api_key == "from-dotenv"
    assert settings.port == 4000


def test_dotenv_outside_working_directory_ignored(monkeypatch, tmp_path):
    _clear(monkeypatch)
    project = tmp_path / "project"
    elsewhere = tmp_path / "elsewhere"
    project.mkdir()
    elsewhere.mkdir()
    (project / ".env").write_text("AQI_API_KEY=real-dev-key\n")
    monkeypatch.chdir(elsewhere)
    assert Settings.from_env().aqi_api_key is None
