"""Tests for on-disk plugin discovery and the library collector."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from DiscordManager.errors import ResolutionError
from DiscordManager.kernel.container import ServiceCollection
from DiscordManager.kernel.event_emitter import EventEmitter
from DiscordManager.plugin.loader import PythonModuleLoader
from DiscordManager.plugin.sources import (
    InstanceSource,
    LibraryCollector,
    LibrarySource,
    TypeSource,
    to_source,
)
from tests.fakes import PluginA

TWO_PLUGINS = textwrap.dedent(
    """
    from DiscordManager import EventEmitter, Plugin
    from tests.fakes import PluginA

    class Zeta(Plugin):
        name = "zeta"

        def __init__(self, emitter: EventEmitter) -> None:
            self.emitter = emitter

    class Alpha(Plugin):
        name = "alpha"

    class _Helper:
        pass
    """
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def make_plugin_dir(root: Path, manifest_name: str, manifest: dict) -> Path:
    directory = root / "weather"
    write(
        directory / "main.py",
        textwrap.dedent(
            """
            from DiscordManager import Plugin

            class Weather(Plugin):
                name = "weather"

            class Forecast(Plugin):
                name = "forecast"
            """
        ),
    )
    if manifest_name.endswith(".json"):
        write(directory / manifest_name, json.dumps(manifest))
    else:
        lines = [f"{key}: {value}" for key, value in manifest.items()]
        write(directory / manifest_name, "\n".join(lines) + "\n")
    return directory


def test_python_file_yields_factories_in_definition_order(tmp_path: Path) -> None:
    library = write(tmp_path / "plugins.py", TWO_PLUGINS)

    factories = PythonModuleLoader().load(library)

    assert [f.plugin_type.__name__ for f in factories] == ["Zeta", "Alpha"]
    assert all(f.origin == str(library) for f in factories)


@pytest.mark.asyncio
async def test_factories_instantiate_through_resolver(tmp_path: Path) -> None:
    library = write(tmp_path / "plugins.py", TWO_PLUGINS)
    emitter = EventEmitter()
    resolver = ServiceCollection().register_instance(EventEmitter, emitter).build()

    zeta_factory = PythonModuleLoader().load(library)[0]
    zeta = await zeta_factory(resolver)

    assert zeta.emitter is emitter


def test_file_without_plugins_yields_nothing(tmp_path: Path) -> None:
    library = write(tmp_path / "empty.py", "VALUE = 1\n")

    assert PythonModuleLoader().load(library) == []


@pytest.mark.parametrize("manifest_name", ["manifest.json", "plugin.yaml"])
def test_manifest_directory_honours_entry_class(tmp_path: Path, manifest_name: str) -> None:
    directory = make_plugin_dir(
        tmp_path, manifest_name, {"name": "weather", "entry_class": "Forecast"}
    )

    factories = PythonModuleLoader().load(directory)

    assert [f.plugin_type.__name__ for f in factories] == ["Forecast"]


def test_manifest_without_entry_class_loads_all_plugins(tmp_path: Path) -> None:
    directory = make_plugin_dir(tmp_path, "manifest.json", {"name": "weather"})

    factories = PythonModuleLoader().load(directory)

    assert [f.plugin_type.__name__ for f in factories] == ["Weather", "Forecast"]


def test_deactivated_manifest_yields_nothing(tmp_path: Path) -> None:
    directory = make_plugin_dir(
        tmp_path, "manifest.json", {"name": "weather", "activated": False}
    )

    assert PythonModuleLoader().load(directory) == []


@pytest.mark.parametrize(
    "manifest",
    [{"name": "weather", "entry_class": "Missing"}, {"name": "weather", "entry_module": "nope"}],
    ids=["missing-class", "missing-module"],
)
def test_broken_manifest_is_a_resolution_error(tmp_path: Path, manifest: dict) -> None:
    directory = make_plugin_dir(tmp_path, "manifest.json", manifest)

    with pytest.raises(ResolutionError):
        PythonModuleLoader().load(directory)


def test_directory_without_manifest_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "bare").mkdir()

    with pytest.raises(ResolutionError):
        PythonModuleLoader().load(tmp_path / "bare")


def test_unsupported_file_type_is_rejected(tmp_path: Path) -> None:
    library = write(tmp_path / "plugin.dll", "binary")

    with pytest.raises(ResolutionError):
        PythonModuleLoader().load(library)


def test_collector_gathers_files_and_manifest_directories(tmp_path: Path) -> None:
    write(tmp_path / "b_plugin.py", "")
    write(tmp_path / "a_plugin.py", "")
    write(tmp_path / "_private.py", "")
    write(tmp_path / "__init__.py", "")
    write(tmp_path / "notes.txt", "")
    make_plugin_dir(tmp_path, "manifest.json", {"name": "weather"})
    (tmp_path / "no_manifest").mkdir()

    collector = LibraryCollector().add_directory(tmp_path)
    collector.add_file(tmp_path / "a_plugin.py")

    assert [p.name for p in collector.files] == ["a_plugin.py", "b_plugin.py", "weather"]
    assert len(collector) == 3


def test_collector_ignores_missing_directory(tmp_path: Path) -> None:
    assert LibraryCollector().add_directory(tmp_path / "missing").files == []


def test_to_source_discriminates_arguments(tmp_path: Path) -> None:
    instance = object()

    assert to_source(PluginA) == TypeSource(PluginA)
    assert to_source(str(tmp_path)) == LibrarySource(tmp_path)
    assert to_source(tmp_path) == LibrarySource(tmp_path)
    assert to_source(instance).plugin is instance
    assert isinstance(to_source(instance), InstanceSource)
