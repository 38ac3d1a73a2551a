from pathlib import Path
import textwrap

import pytest

from hoist.config.loader import load_config, profile_path

def test_load_config_minimal_ok(tmp_path: Path):
    cfg_text = textwrap.dedent("""
        serverAddress: 203.0.113.10
        certEmail: ops@example.com
        publicKey: age1abc
    """)
    f = tmp_path / "default.yaml"
    f.write_text(cfg_text)
    cfg = load_config(f)
    assert cfg.server_address == "203.0.113.10"
    assert cfg.cert_email == "ops@example.com"
    assert cfg.public_key == "age1abc"

def test_load_config_keeps_dollar_text(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOIST_TEST_EMAIL", "env@example.com")
    f = tmp_path / "default.yaml"
    f.write_text("serverAddress: 203.0.113.10\ncertEmail: ${HOIST_TEST_EMAIL}\n")
    assert load_config(f).cert_email == "${HOIST_TEST_EMAIL}"

def test_load_config_rejects_non_mapping(tmp_path: Path):
    f = tmp_path / "default.yaml"
    f.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(f)

def test_load_config_rejects_bad_address(tmp_path: Path):
    f = tmp_path / "default.yaml"
    f.write_text("serverAddress: localhost\ncertEmail: ops@example.com\n")
    with pytest.raises(ValueError):
        load_config(f)

def test_profile_path_honours_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOIST_CONFIG_DIR", str(tmp_path))
    assert profile_path("staging") == tmp_path / "staging.yaml"
