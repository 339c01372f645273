from smart_filter.config import FilterConfig


def test_defaults():
    config = FilterConfig()

    assert config.port == 3000
    assert config.safe_category == "male_only"
    assert config.classify_url == "http://aimodel.ddns.net:8000/predict/single"
    assert config.max_image_size_bytes == 10 * 1024 * 1024


def test_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("NSFW_API_BASE", "http://nsfw.internal:9000/")
    monkeypatch.setenv("CLASSIFY_TIMEOUT", "2.5")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.test, https://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = FilterConfig.from_env()

    assert config.port == 8080
    assert config.classify_url == "http://nsfw.internal:9000/predict/single"
    assert config.classify_timeout == 2.5
    assert config.cors_allow_origins == ["https://a.test", "https://b.test"]
    assert config.log_level == "DEBUG"
    assert config.fetch_timeout == 15.0
