"""
Tests for credential resolution and the runtime config handed to scripts.
"""

import pytest

from agentflow.credentials import (
    DEFAULT_BASE_URL,
    IntegrationSpec,
    ScriptEnvironment,
    get_integration,
    piece_for,
)
from agentflow.errors import CredentialError


@pytest.fixture
def no_dotenv(tmp_path):
    return tmp_path / "absent.env"


def test_override_wins(monkeypatch, no_dotenv):
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    env = ScriptEnvironment.for_testing({"github": "from-test"}, dotenv_path=no_dotenv)

    assert env.get_credential("github") == "from-test"


def test_environment_variable(monkeypatch, no_dotenv):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    env = ScriptEnvironment(dotenv_path=no_dotenv)

    assert env.get_credential("github") == "ghp_env"
    assert env.is_available("github")


def test_dotenv_file_fallback(monkeypatch, tmp_path):
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    dotenv_path = tmp_path / ".env"
    dotenv_path.write_text("NOTION_API_KEY=secret_from_file\n")
    env = ScriptEnvironment(dotenv_path=dotenv_path)

    assert env.get_credential("notion") == "secret_from_file"


def test_missing_credential(monkeypatch, no_dotenv):
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    env = ScriptEnvironment(dotenv_path=no_dotenv)

    assert env.get_credential("discord") is None
    assert not env.is_available("discord")
    with pytest.raises(CredentialError, match="DISCORD_BOT_TOKEN"):
        env.require("discord")


def test_unknown_integration(no_dotenv):
    env = ScriptEnvironment(dotenv_path=no_dotenv)

    assert env.get_credential("acme") is None
    assert env.base_url("acme") == DEFAULT_BASE_URL
    with pytest.raises(CredentialError, match="Unknown integration"):
        env.require("acme")


def test_registry_lookups():
    assert get_integration("slack").base_url == "https://slack.com/api"
    assert get_integration("nope") is None
    assert piece_for("github") == "@activepieces/piece-github"
    assert piece_for("nope") == "@activepieces/piece-http"


def test_basic_auth_credentials(no_dotenv):
    specs = {"jira": IntegrationSpec(env_var="JIRA_AUTH", auth="basic")}
    env = ScriptEnvironment.for_testing({"jira": "ada:pw"}, specs=specs, dotenv_path=no_dotenv)

    assert env.credentials_for("jira") == {"username": "ada", "password": "pw"}


def test_script_config_shape(monkeypatch, no_dotenv):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    env = ScriptEnvironment.for_testing({"slack": "xoxb-1"}, dotenv_path=no_dotenv)

    assert env.as_script_config(["slack"]) == {
        "llm": {"api_base": "https://api.openai.com/v1", "api_key": None},
        "integrations": {
            "slack": {
                "base_url": "https://slack.com/api",
                "credentials": {"api_key": "xoxb-1"},
            }
        },
    }
