import httpx
import pytest

from commitguard_core.config import (
    DEFAULT_RULES,
    MAX_FILE_SIZE_DEFAULT,
    TIMEOUT_MS_DEFAULT,
    GuardConfig,
    clamp,
    load_config,
    load_rules,
    probe_local_backend,
    select_backend,
)
from commitguard_core.errors import ConfigurationError


def _no_local(endpoint):
    return False


def _load(tmp_path, environ=None, cli=None, probe=_no_local, yaml_text=None):
    path = tmp_path / ".commitguard.yml"
    if yaml_text is not None:
        path.write_text(yaml_text)
    return load_config(str(path), cli_overrides=cli, environ=environ or {}, probe=probe)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = _load(tmp_path)
    assert config.backend == "openai"
    assert config.model == "gpt-4o"
    assert config.credential is None
    assert config.timeout_ms == TIMEOUT_MS_DEFAULT
    assert config.max_file_size == MAX_FILE_SIZE_DEFAULT
    assert config.cache == "file"
    assert config.exclude == ()


def test_config_file_overrides_defaults(tmp_path):
    config = _load(
        tmp_path,
        yaml_text=(
            "backend: claude\n"
            "model: claude-3-5-haiku\n"
            "timeout_ms: 10000\n"
            "cache: sqlite\n"
            "exclude:\n"
            "  - '*.pb.go'\n"
        ),
    )
    assert config.backend == "claude"
    assert config.model == "claude-3-5-haiku"
    assert config.timeout_ms == 10_000
    assert config.cache == "sqlite"
    assert config.exclude == ("*.pb.go",)


def test_single_exclude_string_accepted(tmp_path):
    assert _load(tmp_path, yaml_text="exclude: docs/*\n").exclude == ("docs/*",)


def test_env_overrides_config_file(tmp_path):
    config = _load(
        tmp_path,
        environ={"AI_PROVIDER": "gemini", "AI_GUARD_TIMEOUT": "20000"},
        yaml_text="backend: claude\ntimeout_ms: 10000\n",
    )
    assert config.backend == "gemini"
    assert config.timeout_ms == 20_000


def test_cli_overrides_env(tmp_path):
    config = _load(
        tmp_path,
        environ={"AI_PROVIDER": "gemini", "AI_MODEL": "env-model"},
        cli={"backend": "cohere", "model": "cli-model", "timeout_ms": 6000},
    )
    assert config.backend == "cohere"
    assert config.model == "cli-model"
    assert config.timeout_ms == 6000


def test_none_cli_overrides_ignored(tmp_path):
    config = _load(tmp_path, environ={"AI_PROVIDER": "claude"}, cli={"backend": None, "model": None})
    assert config.backend == "claude"


def test_backend_specific_model_env(tmp_path):
    config = _load(tmp_path, environ={"AI_PROVIDER": "claude", "CLAUDE_MODEL": "claude-opus"})
    assert config.model == "claude-opus"


def test_generic_model_env_wins_over_backend_specific(tmp_path):
    config = _load(tmp_path, environ={"AI_MODEL": "generic", "OPENAI_MODEL": "specific"})
    assert config.model == "generic"


def test_alias_normalised(tmp_path):
    assert _load(tmp_path, environ={"AI_PROVIDER": "Anthropic"}).backend == "claude"


@pytest.mark.parametrize(
    "raw,expected",
    [("1000", 5_000), ("999999", 120_000), ("abc", TIMEOUT_MS_DEFAULT), ("0", TIMEOUT_MS_DEFAULT)],
)
def test_timeout_clamped(tmp_path, raw, expected):
    assert _load(tmp_path, environ={"AI_GUARD_TIMEOUT": raw}).timeout_ms == expected


@pytest.mark.parametrize("raw,expected", [("10", 1_000), ("5000000", 1_000_000), ("2000", 2_000)])
def test_max_file_size_clamped(tmp_path, raw, expected):
    assert _load(tmp_path, environ={"AI_GUARD_MAX_FILE_SIZE": raw}).max_file_size == expected


def test_credential_from_backend_env(tmp_path):
    config = _load(tmp_path, environ={"AI_PROVIDER": "claude", "ANTHROPIC_API_KEY": "ant"})
    assert config.credential == "ant"


def test_generic_credential_fallback(tmp_path):
    config = _load(tmp_path, environ={"AI_PROVIDER": "cohere", "AI_API_KEY": "generic"})
    assert config.credential == "generic"


def test_credential_not_in_repr(tmp_path):
    config = _load(tmp_path, environ={"OPENAI_API_KEY": "sk-very-secret"})
    assert "sk-very-secret" not in repr(config)


def test_no_cache_flag(tmp_path):
    assert _load(tmp_path, cli={"no_cache": True}, yaml_text="cache: sqlite\n").cache == "none"


def test_malformed_yaml_raises_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        _load(tmp_path, yaml_text="backend: [unclosed\n")


@pytest.mark.parametrize(
    "yaml_text",
    [
        "exclude: 5\n",
        "exclude:\n  - 5\n",
        "exclude: {a: 1}\n",
        "local_endpoint: 11434\n",
        "backend: 7\n",
        "model: [gpt-4o]\n",
        "rules: true\n",
        "ignore_file: 3\n",
        "cache: [sqlite]\n",
        "cache_dir: {path: x}\n",
    ],
)
def test_wrongly_typed_value_raises_configuration_error(tmp_path, yaml_text):
    def _probe(endpoint):
        raise AssertionError("probe should not run")

    with pytest.raises(ConfigurationError):
        _load(tmp_path, yaml_text=yaml_text, probe=_probe)


def test_non_mapping_yaml_ignored(tmp_path):
    assert _load(tmp_path, yaml_text="- just\n- a list\n").backend == "openai"


def test_config_is_immutable(tmp_path):
    config = _load(tmp_path)
    with pytest.raises(AttributeError):
        config.backend = "claude"


class TestSelectBackend:
    def test_override_wins(self):
        assert select_backend("gemini", {"OPENAI_API_KEY": "x"}, probe=_no_local) == "gemini"

    def test_first_available_credential(self):
        environ = {"COHERE_API_KEY": "c", "GOOGLE_API_KEY": "g"}
        assert select_backend(None, environ, probe=_no_local) == "gemini"

    def test_local_backend_when_no_credentials(self):
        assert select_backend(None, {}, probe=lambda endpoint: True) == "ollama"

    def test_probe_receives_endpoint(self):
        seen = []
        select_backend(None, {}, "http://gpu-box:11434", probe=lambda endpoint: seen.append(endpoint) or False)
        assert seen == ["http://gpu-box:11434"]

    def test_fallback(self):
        assert select_backend(None, {}, probe=_no_local) == "openai"

    def test_credentials_skip_probe(self):
        def _probe(endpoint):
            raise AssertionError("probe should not run")

        assert select_backend(None, {"OPENAI_API_KEY": "x"}, probe=_probe) == "openai"


class TestProbeLocalBackend:
    def test_reachable(self, mocker):
        get = mocker.patch("commitguard_core.config.httpx.get", return_value=httpx.Response(200, json={"models": []}))
        assert probe_local_backend("http://localhost:11434") is True
        assert get.call_args.args[0] == "http://localhost:11434/api/tags"

    def test_unreachable(self, mocker):
        mocker.patch("commitguard_core.config.httpx.get", side_effect=httpx.ConnectError("refused"))
        assert probe_local_backend() is False

    def test_error_status(self, mocker):
        mocker.patch("commitguard_core.config.httpx.get", return_value=httpx.Response(404))
        assert probe_local_backend() is False


class TestLoadRules:
    def test_custom_rules(self, tmp_path):
        path = tmp_path / "rules.md"
        path.write_text("- No print statements")
        assert load_rules(GuardConfig(backend="openai", model="m", rules_path=str(path))) == "- No print statements"

    def test_missing_rules_falls_back(self, tmp_path):
        config = GuardConfig(backend="openai", model="m", rules_path=str(tmp_path / "missing.md"))
        assert load_rules(config) == DEFAULT_RULES


def test_clamp():
    assert clamp(5, 1, 10) == 5
    assert clamp(-1, 1, 10) == 1
    assert clamp(11, 1, 10) == 10
