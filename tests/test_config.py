import pytest

from transcript2audio.config import load_voice_config, require_secret
from transcript2audio.errors import ConfigurationError, error_chain


def test_load_voice_config(tmp_path):
    config = tmp_path / "voices.toml"
    config.write_text('[voices]\nAlice = "voice-a"\n"Dr. Bob" = "voice-b"\n', encoding="utf-8")

    assert load_voice_config(config) == {"Alice": "voice-a", "Dr. Bob": "voice-b"}


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        load_voice_config(tmp_path / "nope.toml")

    assert "Failed to read voice config file" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_invalid_toml(tmp_path):
    config = tmp_path / "voices.toml"
    config.write_text("[voices\nAlice = ", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        load_voice_config(config)

    assert "Failed to parse voice config TOML" in str(excinfo.value)


def test_missing_voices_table(tmp_path):
    config = tmp_path / "voices.toml"
    config.write_text('[speakers]\nAlice = "voice-a"\n', encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_voice_config(config)


def test_non_string_voice_ids(tmp_path):
    config = tmp_path / "voices.toml"
    config.write_text('[voices]\nAlice = 7\nBob = "voice-b"\n', encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        load_voice_config(config)

    assert "Alice" in str(excinfo.value)


def test_require_secret(monkeypatch):
    monkeypatch.setenv("SOME_TEST_SECRET", "s3cret")
    assert require_secret("SOME_TEST_SECRET") == "s3cret"

    monkeypatch.setenv("SOME_TEST_SECRET", "")
    with pytest.raises(ConfigurationError):
        require_secret("SOME_TEST_SECRET")


def test_error_chain_follows_causes():
    try:
        try:
            raise OSError("disk full")
        except OSError as exc:
            raise ConfigurationError("could not save") from exc
    except ConfigurationError as exc:
        assert error_chain(exc) == ["could not save", "disk full"]
