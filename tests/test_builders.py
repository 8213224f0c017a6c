import os
from pathlib import Path

from provisio.builders import make_registry
from provisio.config import RegistryConfig
from provisio.loader import StaticLoader


def write_default_script(root: Path, body: str):
    script = root / "deps" / "default.py"
    script.parent.mkdir(parents=True)
    script.write_text(body)


def test_config_from_env():
    config = RegistryConfig.from_env(
        {
            "PROVISIO_PATH": os.pathsep.join(["/opt/app", "/opt/lib"]),
            "PROVISIO_ENV": "prod",
        }
    )

    assert config.search_paths == [Path("/opt/app"), Path("/opt/lib")]
    assert config.environment == "prod"


def test_config_defaults_to_working_directory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    config = RegistryConfig.from_env({"PROVISIO_ENV": ""})

    assert config.search_paths == [Path.cwd()]
    assert config.environment is None


def test_make_registry_reads_process_environment(monkeypatch, tmp_path):
    write_default_script(
        tmp_path, "def register(registry):\n    registry.publish('answer', 42)\n"
    )
    monkeypatch.setenv("PROVISIO_PATH", str(tmp_path))
    monkeypatch.delenv("PROVISIO_ENV", raising=False)

    registry = make_registry()

    assert registry.get("answer") == 42
    assert registry.environment is None


def test_make_registry_with_explicit_loader():
    loader = StaticLoader(
        {
            "deps/uat/default.py": [lambda registry: registry.publish("db", "uat-db")],
            "deps/default.py": [lambda registry: registry.publish("db", "real-db")],
        }
    )

    registry = make_registry(RegistryConfig(environment="uat"), loader)

    assert registry.get("db") == "uat-db"
