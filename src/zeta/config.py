"""Configuration management for ZETA."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

ZETA_HOME = Path(os.environ.get("ZETA_HOME", Path.home() / "zeta"))
CONFIG_FILE = ZETA_HOME / "config" / "zeta.conf"
DATA_DIR = ZETA_HOME / "data"


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


@dataclass
class Config:
    """ZETA configuration."""

    linear_api_key: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 20.0
    disambiguate: bool = True
    # Client name -> Linear project id
    client_projects: dict[str, str] = field(default_factory=dict)
    status_ticket_marker: str = "Status Update"
    weekly_template_id: str = ""
    tickets_dir: str = ""

    def project_id(self, client_name: str) -> str:
        """Resolve a client name (case-insensitive) to its Linear project id."""
        for name, project_id in self.client_projects.items():
            if name.lower() == client_name.lower():
                return project_id
        known = ", ".join(self.client_projects) or "none configured"
        raise ConfigError(f"Unknown client '{client_name}' (known: {known})")

    def require_linear_key(self) -> str:
        if not self.linear_api_key:
            raise ConfigError("LINEAR_API_KEY not set in zeta.conf or environment")
        return self.linear_api_key


def _parse_client_projects(value: str) -> dict[str, str]:
    # JSON format: {"Acme": "uuid", ...}
    # Simple format: "Acme:uuid,Globex:uuid"
    projects: dict[str, str] = {}
    if value.startswith("{"):
        try:
            data = json.loads(value)
            projects = {str(k): str(v) for k, v in data.items()}
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning(f"Failed to parse CLIENT_PROJECTS JSON: {e}")
        return projects

    for entry in value.split(","):
        entry = entry.strip()
        if not entry or ":" not in entry:
            continue
        name, project_id = entry.split(":", 1)
        projects[name.strip()] = project_id.strip()
    return projects


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from zeta.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = value.strip()
            # JSON values keep their braces and quotes
            if not value.startswith("{"):
                value = _unquote(value)

            match key:
                case "linear_api_key":
                    config.linear_api_key = value
                case "openai_api_key":
                    config.openai_api_key = value
                case "openai_model":
                    config.openai_model = value
                case "openai_timeout":
                    try:
                        config.openai_timeout = float(value)
                    except ValueError:
                        logger.warning(f"Ignoring invalid OPENAI_TIMEOUT: {value!r}")
                case "disambiguate":
                    config.disambiguate = value.lower() not in ("0", "false", "no", "off")
                case "client_projects":
                    config.client_projects = _parse_client_projects(value)
                case "status_ticket_marker":
                    config.status_ticket_marker = value
                case "weekly_template_id":
                    config.weekly_template_id = value
                case "tickets_dir":
                    config.tickets_dir = value
                case _:
                    logger.debug(f"Unknown config key: {key}")

    config.linear_api_key = os.environ.get("LINEAR_API_KEY", config.linear_api_key)
    config.openai_api_key = os.environ.get("OPENAI_API_KEY", config.openai_api_key)
    config.openai_model = os.environ.get("OPENAI_MODEL", config.openai_model)

    return config
