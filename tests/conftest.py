import pytest

from common.config import DocumentConfig, GlobalYAMLConfig, MonitorConfig, Secrets

SECRET_ENV = ("GAS_SHARED_SECRET", "GAS_WEBHOOK_URL", "SLACK_WEBHOOK_URL")


@pytest.fixture
def clean_env(monkeypatch):
    for name in SECRET_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def monitor_config(clean_env):
    return MonitorConfig(
        settings=GlobalYAMLConfig(
            document=DocumentConfig(name="Terms", target_url="https://example.com/terms.html")
        ),
        secrets=Secrets(
            gas_shared_secret="s3cret",
            gas_webhook_url="https://hook.example/exec",
            _env_file=None,
        ),
    )
