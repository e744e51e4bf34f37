"""Tests for configuration loading."""

import pytest

from zeta.config import Config, ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("LINEAR_API_KEY", "OPENAI_API_KEY", "OPENAI_MODEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def conf(tmp_path):
    def write(text: str):
        path = tmp_path / "zeta.conf"
        path.write_text(text)
        return path

    return write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.conf")
        assert config == Config()

    def test_basic_keys(self, conf):
        path = conf(
            "# comment\n"
            "LINEAR_API_KEY=lin_abc\n"
            "OPENAI_MODEL = gpt-4o\n"
            "STATUS_TICKET_MARKER=\"Status Update\"  # title filter\n"
            "WEEKLY_TEMPLATE_ID=tmpl-1 # inline comment\n"
            "not a setting\n"
        )
        config = load_config(path)
        assert config.linear_api_key == "lin_abc"
        assert config.openai_model == "gpt-4o"
        assert config.status_ticket_marker == "Status Update"
        assert config.weekly_template_id == "tmpl-1"

    def test_client_projects_json(self, conf):
        path = conf('CLIENT_PROJECTS={"Acme": "p-1", "Globex": "p-2"}\n')
        config = load_config(path)
        assert config.client_projects == {"Acme": "p-1", "Globex": "p-2"}

    def test_client_projects_simple_format(self, conf):
        path = conf("CLIENT_PROJECTS=Acme:p-1, Globex : p-2,broken\n")
        config = load_config(path)
        assert config.client_projects == {"Acme": "p-1", "Globex": "p-2"}

    def test_client_projects_bad_json_is_ignored(self, conf):
        path = conf("CLIENT_PROJECTS={not json\n")
        assert load_config(path).client_projects == {}

    def test_disambiguate_flag(self, conf):
        assert load_config(conf("DISAMBIGUATE=off\n")).disambiguate is False
        assert load_config(conf("DISAMBIGUATE=yes\n")).disambiguate is True

    def test_timeout(self, conf):
        assert load_config(conf("OPENAI_TIMEOUT=5\n")).openai_timeout == 5.0
        assert load_config(conf("OPENAI_TIMEOUT=soon\n")).openai_timeout == 20.0

    def test_environment_overrides_file(self, conf, monkeypatch):
        monkeypatch.setenv("LINEAR_API_KEY", "from-env")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        config = load_config(conf("LINEAR_API_KEY=from-file\n"))
        assert config.linear_api_key == "from-env"
        assert config.openai_api_key == "sk-env"


class TestConfig:
    def test_project_id_ignores_case(self):
        config = Config(client_projects={"Insight-Ally": "p-9"})
        assert config.project_id("insight-ally") == "p-9"

    def test_unknown_client(self):
        config = Config(client_projects={"Acme": "p-1"})
        with pytest.raises(ConfigError, match="Acme"):
            config.project_id("Globex")

    def test_require_linear_key(self):
        with pytest.raises(ConfigError):
            Config().require_linear_key()
        assert Config(linear_api_key="k").require_linear_key() == "k"
