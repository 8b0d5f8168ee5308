"""
Integration registry and the runtime configuration handed to generated scripts.

Generated scripts never carry endpoints or secrets. At their own run time
they receive a ``config`` object built here: per-integration base URLs and
credentials plus the text-generation endpoint. The simulator uses the same
object to decide whether a simulated integration call is authenticated.

Usage:
    # Production
    env = ScriptEnvironment()
    token = env.get_credential("slack")  # SLACK_API_TOKEN from env or .env
    config = env.as_script_config(["slack"])

    # Testing
    env = ScriptEnvironment.for_testing({"slack": "xoxb-test"})
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from agentflow.errors import CredentialError

DEFAULT_BASE_URL = "https://api.example.com"
DEFAULT_PIECE = "@activepieces/piece-http"
LLM_CREDENTIAL = "llm"


@dataclass
class IntegrationSpec:
    """Specification for a third-party integration."""

    env_var: str
    """Environment variable holding the credential (e.g., 'SLACK_API_TOKEN')"""

    base_url: str = DEFAULT_BASE_URL
    """API base URL that node endpoints are appended to"""

    piece_name: str = DEFAULT_PIECE
    """Branch-map back end piece implementing this integration"""

    auth: str = "bearer"
    """'bearer' (token) or 'basic' ('user:password' credential)"""

    description: str = ""


INTEGRATIONS: dict[str, IntegrationSpec] = {
    "slack": IntegrationSpec(
        env_var="SLACK_API_TOKEN",
        base_url="https://slack.com/api",
        piece_name="@activepieces/piece-slack",
        description="Slack bot token",
    ),
    "notion": IntegrationSpec(
        env_var="NOTION_API_KEY",
        base_url="https://api.notion.com/v1",
        piece_name="@activepieces/piece-notion",
        description="Notion internal integration secret",
    ),
    "gmail": IntegrationSpec(
        env_var="GMAIL_ACCESS_TOKEN",
        base_url="https://gmail.googleapis.com/gmail/v1",
        piece_name="@activepieces/piece-gmail",
        description="Gmail OAuth2 access token",
    ),
    "github": IntegrationSpec(
        env_var="GITHUB_TOKEN",
        base_url="https://api.github.com",
        piece_name="@activepieces/piece-github",
        description="GitHub Personal Access Token",
    ),
    "discord": IntegrationSpec(
        env_var="DISCORD_BOT_TOKEN",
        base_url="https://discord.com/api/v10",
        piece_name="@activepieces/piece-discord",
        description="Discord bot token",
    ),
    "airtable": IntegrationSpec(
        env_var="AIRTABLE_API_KEY",
        base_url="https://api.airtable.com/v0",
        piece_name="@activepieces/piece-airtable",
        description="Airtable personal access token",
    ),
    "google-sheets": IntegrationSpec(
        env_var="GOOGLE_SHEETS_ACCESS_TOKEN",
        base_url="https://sheets.googleapis.com/v4",
        piece_name="@activepieces/piece-google-sheets",
        description="Google Sheets OAuth2 access token",
    ),
}

LLM_SPEC = IntegrationSpec(
    env_var="OPENAI_API_KEY",
    base_url="https://api.openai.com/v1",
    description="OpenAI-compatible text generation API key",
)


def get_integration(integration_id: str) -> IntegrationSpec | None:
    return INTEGRATIONS.get(integration_id)


def piece_for(integration_id: str) -> str:
    """Piece name for an integration, falling back to the generic HTTP piece."""
    spec = INTEGRATIONS.get(integration_id)
    return spec.piece_name if spec else DEFAULT_PIECE


class ScriptEnvironment:
    """
    Resolves integration credentials and renders the script ``config`` object.

    Credential lookup order:
    1. Test overrides (for testing)
    2. os.environ (explicit environment variables take precedence)
    3. .env file (read fresh each time, os.environ untouched)
    """

    def __init__(
        self,
        specs: dict[str, IntegrationSpec] | None = None,
        _overrides: dict[str, str] | None = None,
        dotenv_path: Path | None = None,
    ):
        self._specs = specs if specs is not None else INTEGRATIONS
        self._overrides = _overrides or {}
        self._dotenv_path = dotenv_path

    @classmethod
    def for_testing(
        cls,
        overrides: dict[str, str],
        specs: dict[str, IntegrationSpec] | None = None,
        dotenv_path: Path | None = None,
    ) -> ScriptEnvironment:
        """
        Create an environment with test credential values.

        Pass a non-existent ``dotenv_path`` to isolate from a real .env file.
        """
        return cls(specs=specs, _overrides=overrides, dotenv_path=dotenv_path)

    def _spec(self, name: str) -> IntegrationSpec | None:
        if name == LLM_CREDENTIAL:
            return LLM_SPEC
        return self._specs.get(name)

    def _read_from_dotenv(self, env_var: str) -> str | None:
        dotenv_path = self._dotenv_path or Path.cwd() / ".env"
        if not dotenv_path.exists():
            return None
        return dotenv_values(dotenv_path).get(env_var)

    def get_credential(self, name: str) -> str | None:
        """Credential for an integration id (or ``"llm"``), None if unset."""
        if name in self._overrides:
            return self._overrides[name]
        spec = self._spec(name)
        if spec is None:
            return None
        env_value = os.environ.get(spec.env_var)
        if env_value:
            return env_value
        return self._read_from_dotenv(spec.env_var)

    def is_available(self, name: str) -> bool:
        return bool(self.get_credential(name))

    def require(self, name: str) -> str:
        """Like get_credential() but raises CredentialError when missing."""
        value = self.get_credential(name)
        if value:
            return value
        spec = self._spec(name)
        if spec is None:
            raise CredentialError(f"Unknown integration '{name}'")
        raise CredentialError(
            f"Missing credential for '{name}'. Set {spec.env_var} in the environment or .env file."
        )

    def base_url(self, name: str) -> str:
        spec = self._spec(name)
        return spec.base_url if spec else DEFAULT_BASE_URL

    def credentials_for(self, name: str) -> dict[str, str]:
        """Credential payload in the shape generated scripts expect."""
        value = self.get_credential(name)
        if not value:
            return {}
        spec = self._spec(name)
        if spec is not None and spec.auth == "basic" and ":" in value:
            username, _, password = value.partition(":")
            return {"username": username, "password": password}
        return {"api_key": value}

    def as_script_config(self, integration_ids: Iterable[str] = ()) -> dict[str, Any]:
        """The ``config`` object passed to generated scripts at run time."""
        return {
            "llm": {
                "api_base": self.base_url(LLM_CREDENTIAL),
                "api_key": self.get_credential(LLM_CREDENTIAL),
            },
            "integrations": {
                integration_id: {
                    "base_url": self.base_url(integration_id),
                    "credentials": self.credentials_for(integration_id),
                }
                for integration_id in integration_ids
            },
        }
