from medrag.qa.config import PipelineSettings


def test_defaults():
    settings = PipelineSettings()

    assert settings.max_message_length == 5000
    assert settings.max_retries == 3
    assert settings.branch_timeout == 30.0
    assert settings.is_production is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("MEDRAG_MAX_RETRIES", "5")
    monkeypatch.setenv("MEDRAG_BRANCH_TIMEOUT", "2.5")
    monkeypatch.setenv("MEDRAG_ENV", "Production")
    monkeypatch.setenv("MEDRAG_MAX_DOCUMENTS", "")

    settings = PipelineSettings.from_env()

    assert settings.max_retries == 5
    assert settings.branch_timeout == 2.5
    assert settings.max_documents == 20
    assert settings.is_production is True
