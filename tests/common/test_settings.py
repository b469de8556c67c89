import logging

from extrato_ofx.common.settings import DEFAULT_CONFIG_PATH, load_settings


def test_packaged_config():
    assert DEFAULT_CONFIG_PATH.exists()
    settings = load_settings(str(DEFAULT_CONFIG_PATH))

    assert settings.max_upload_mb == 20
    assert settings.account_id == "XXXXXX"
    assert settings.extraction.x_tolerance == 3
    assert settings.extraction.page_separator == "\n"


def test_yaml_overrides(tmp_path, monkeypatch):
    monkeypatch.delenv("EXTRATO_OFX_LOG_LEVEL", raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text(
        "logging:\n  level: DEBUG\n  file: null\n"
        "api:\n  max_upload_mb: 5\n  cors_origins: [https://extrato.example]\n"
        "ofx:\n  account_id: 12345-6\n"
        "extraction:\n  layout: true\n  max_pages: 2\n  unknown_key: 1\n",
        encoding="utf-8",
    )

    settings = load_settings(str(path))

    assert settings.log_level_value == logging.DEBUG
    assert settings.log_file is None
    assert settings.max_upload_mb == 5
    assert settings.cors_origins == ["https://extrato.example"]
    assert settings.account_id == "12345-6"
    assert settings.extraction.layout is True
    assert settings.extraction.max_pages == 2


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("EXTRATO_OFX_LOG_LEVEL", raising=False)
    settings = load_settings(str(tmp_path / "absent.yaml"))

    assert settings.log_level == "INFO"
    assert settings.max_upload_mb == 20


def test_environment_overrides(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("logging:\n  level: INFO\n", encoding="utf-8")
    monkeypatch.setenv("EXTRATO_OFX_CONFIG", str(path))
    monkeypatch.setenv("EXTRATO_OFX_LOG_LEVEL", "warning")

    settings = load_settings()

    assert settings.log_level_value == logging.WARNING
