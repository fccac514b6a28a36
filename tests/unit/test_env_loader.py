import os
from pathlib import Path

import gliderecord.env_loader as env_loader
from gliderecord.env_loader import load_env_files


def test_load_env_files_loads_first_existing(tmp_path, monkeypatch):
    """load_env_files should call load_dotenv on the first existing candidate."""
    env1 = tmp_path / ".env"
    env2 = tmp_path / ".dotenv"
    env1.write_text("GLIDE_INSTANCE=dev1\n")
    env2.write_text("SHOULD_NOT_BE_USED=1\n")

    calls = []

    def fake_load_dotenv(path):
        calls.append(Path(path))
        return True

    monkeypatch.setattr(env_loader, "load_dotenv", fake_load_dotenv)

    loaded = load_env_files(candidates=[env1, env2], quiet=True)

    assert calls == [env1]
    assert loaded == env1


def test_load_env_files_no_existing_files(tmp_path, monkeypatch):
    """If no candidate exists, load_dotenv should never be called."""
    missing = tmp_path / "missing.env"

    calls = []
    monkeypatch.setattr(env_loader, "load_dotenv", lambda path: calls.append(path))

    assert load_env_files(candidates=[missing], quiet=True) is None
    assert calls == []


def test_load_env_files_sets_variables(tmp_path, monkeypatch):
    """Real python-dotenv: values from the file land in os.environ."""
    env = tmp_path / ".env"
    env.write_text("GLIDE_USERNAME=from_dotenv\n")
    monkeypatch.delenv("GLIDE_USERNAME", raising=False)
    monkeypatch.chdir(tmp_path)

    assert load_env_files() == env

    assert os.environ["GLIDE_USERNAME"] == "from_dotenv"
    monkeypatch.delenv("GLIDE_USERNAME")
