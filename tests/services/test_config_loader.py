import pytest

from nutstool.errors import ConfigError
from nutstool.services.config_loader import ConfigLoader, default_config_path
from nutstool.services.tool_home import ToolHomeService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        "verbose: 1\ncipher: none\nkdf_iterations: 200000\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded == {"verbose": 1, "cipher": "none", "kdf_iterations": 200000}


def test_config_loader_returns_empty_mapping_without_path():
    assert ConfigLoader().load(None) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


def test_config_loader_rejects_non_mapping_root(tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


@pytest.mark.parametrize(
    "content, message",
    [
        ("verbose: -1\n", "verbose"),
        ("verbose: true\n", "verbose"),
        ("kdf_iterations: many\n", "kdf_iterations"),
        ("cipher: rot13\n", "cipher"),
        ("log_file: 5\n", "log_file"),
        ("log_file: ''\n", "log_file"),
    ],
)
def test_config_loader_validates_values(tmp_path, content, message):
    config_file = tmp_path / "config.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        ConfigLoader().load(str(config_file))


def test_default_config_path_does_not_create_tool_home(tmp_path):
    service = ToolHomeService(DummyLogger(), home_lookup=lambda: str(tmp_path))

    assert default_config_path(service) is None
    assert not (tmp_path / ".nuts").exists()

    (tmp_path / ".nuts").mkdir()
    (tmp_path / ".nuts" / "config.yml").write_text("verbose: 2\n", encoding="utf-8")

    assert default_config_path(service) == str(tmp_path / ".nuts" / "config.yml")


def test_default_config_path_without_home():
    service = ToolHomeService(DummyLogger(), home_lookup=lambda: None)

    assert default_config_path(service) is None
