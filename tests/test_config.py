import pytest

from services.classifier import DEFAULT_MODEL
from services.config import ConfigError, load_settings


class BrokenSecrets:
    """Mimics ``st.secrets`` when no secrets.toml exists."""

    def get(self, key, default=None):
        raise FileNotFoundError("No secrets found")


def test_missing_api_key_is_fatal():
    with pytest.raises(ConfigError):
        load_settings(secrets={}, environ={})


def test_environment_is_used_when_secrets_are_unavailable():
    settings = load_settings(
        secrets=BrokenSecrets(),
        environ={"OPENAI_API_KEY": "sk-env", "OPENAI_TIMEOUT": "15"},
    )

    assert settings.api_key == "sk-env"
    assert settings.model == DEFAULT_MODEL
    assert settings.timeout == 15.0
    assert settings.api_base is None
    assert settings.hierarchy_path is None


def test_secrets_take_precedence_over_environment():
    settings = load_settings(
        secrets={"OPENAI_API_KEY": "sk-secret", "OPENAI_MODEL": "gpt-4o"},
        environ={
            "OPENAI_API_KEY": "sk-env",
            "OPENAI_API_BASE": "https://proxy.example.com/v1/",
            "HIERARCHY_PATH": "hierarchy.csv",
        },
    )

    assert settings.api_key == "sk-secret"
    assert settings.model == "gpt-4o"
    assert settings.api_base == "https://proxy.example.com/v1"
    assert settings.hierarchy_path == "hierarchy.csv"


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_invalid_timeout_is_rejected(value):
    with pytest.raises(ConfigError):
        load_settings(secrets={}, environ={"OPENAI_API_KEY": "sk", "OPENAI_TIMEOUT": value})
