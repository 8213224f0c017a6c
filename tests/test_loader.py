import sys
import textwrap

import pytest

from provisio.errors import RegistrationScriptError
from provisio.loader import FileSystemLoader, StaticLoader
from provisio.registry import Registry


def write_script(path, body):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body))
    return path


@pytest.fixture
def module_root(tmp_path):
    root = tmp_path / "module"
    write_script(
        root / "deps" / "default.py",
        """
        def register(registry):
            registry.provide("key1", lambda: "key1-dep1")
            registry.provide("key2", lambda: "key2-dep1")
        """,
    )
    write_script(
        root / "deps" / "env" / "default.py",
        """
        def register(registry):
            registry.publish("key1", "key1-env1")
        """,
    )
    return root.resolve()


@pytest.fixture
def app_root(tmp_path):
    root = tmp_path / "app"
    write_script(
        root / "deps" / "default.py",
        """
        def register(registry):
            registry.provide("key2", lambda: "key2-dep2")
            registry.provide("key3", lambda r: r.get("key2") + "+key3-dep2")
        """,
    )
    return root.resolve()


def test_list_files_follows_search_path_order(module_root, app_root):
    loader = FileSystemLoader([app_root, module_root])

    assert loader.list_files("deps/default.py") == [
        str(app_root / "deps" / "default.py"),
        str(module_root / "deps" / "default.py"),
    ]
    assert loader.list_files("deps/env/default.py") == [
        str(module_root / "deps" / "env" / "default.py")
    ]
    assert loader.list_files("deps/missing/default.py") == []


def test_load_returns_register_function(module_root):
    loader = FileSystemLoader([module_root])
    registry = Registry()

    register = loader.load(loader.list_files("deps/default.py")[0])
    register(registry)

    assert registry.get("key1") == "key1-dep1"


def test_load_rejects_script_without_register(tmp_path):
    script = write_script(tmp_path / "deps" / "default.py", "VALUE = 1\n")

    with pytest.raises(RegistrationScriptError, match="no callable 'register'") as exc_info:
        FileSystemLoader([tmp_path]).load(str(script))

    assert exc_info.value.path == str(script)


def script_modules():
    return {name for name in sys.modules if name.startswith("_provisio_script_")}


def test_rejected_script_is_not_left_in_sys_modules(tmp_path):
    script = write_script(tmp_path / "deps" / "default.py", "register = 42\n")
    before = script_modules()

    with pytest.raises(RegistrationScriptError, match="no callable 'register'"):
        FileSystemLoader([tmp_path]).load(str(script))

    assert script_modules() == before


def test_load_wraps_import_errors(tmp_path):
    script = write_script(tmp_path / "deps" / "default.py", "raise ImportError('nope')\n")

    with pytest.raises(RegistrationScriptError, match="nope"):
        FileSystemLoader([tmp_path]).load(str(script))


def test_registry_loads_default_scripts(module_root, app_root):
    registry = Registry(FileSystemLoader([module_root, app_root]))

    assert registry.get("key1") == "key1-dep1"
    assert registry.get("key2") == "key2-dep1"
    assert registry.get("key3") == "key2-dep1+key3-dep2"
    assert registry.environment is None


def test_environment_scripts_override_defaults(module_root, app_root):
    registry = Registry(FileSystemLoader([module_root, app_root]), environment="env")

    assert registry.get("key1") == "key1-env1"
    assert registry.get("key2") == "key2-dep1"
    assert registry.environment == "env"


def test_static_loader_runs_scripts_in_order():
    calls = []

    def env_register(registry):
        calls.append("env")
        registry.publish("greeting", "hello from test")

    def first_register(registry):
        calls.append("first")
        registry.publish("greeting", "hello")

    def second_register(registry):
        calls.append("second")
        registry.provide("shout", lambda r: r.get("greeting").upper())

    loader = StaticLoader(
        {
            "deps/test/default.py": [env_register],
            "deps/default.py": [first_register, second_register],
        }
    )
    registry = Registry(loader, environment="test")

    assert calls == ["env", "first", "second"]
    assert registry.get("shout") == "HELLO FROM TEST"


def test_static_loader_lists_nothing_for_unknown_path():
    loader = StaticLoader({"deps/default.py": [lambda registry: None]})

    assert loader.list_files("deps/prod/default.py") == []
    assert loader.list_files("deps/default.py") == ["deps/default.py#0"]


def test_static_loader_rejects_unknown_script():
    with pytest.raises(RegistrationScriptError, match="no such script"):
        StaticLoader({}).load("deps/default.py#0")


class RecordingLoader:
    def __init__(self):
        self.listed = []

    def list_files(self, relative_path):
        self.listed.append(relative_path)
        return []

    def load(self, path):
        raise AssertionError("nothing to load")


def test_registry_lists_environment_then_default_scripts():
    loader = RecordingLoader()
    Registry(loader, "env")

    assert loader.listed == ["deps/env/default.py", "deps/default.py"]


def test_registry_without_environment_lists_only_defaults():
    loader = RecordingLoader()
    Registry(loader)

    assert loader.listed == ["deps/default.py"]
