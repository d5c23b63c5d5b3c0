"""Tests for token set and theme manifest loading."""

import json
from pathlib import Path

import pytest

from chassis_tokens.errors import ConfigurationError, LoadError
from chassis_tokens.ir import TokenEntry
from chassis_tokens.loader import (
    TokenSource,
    build_graph,
    load_themes,
    load_token_set,
    merge_graphs,
    walk_graph,
)


def _write(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestBuildGraph:
    def test_group_type_is_inherited(self):
        graph = build_graph(
            {"color": {"$type": "color", "brand": {"primary": {"$value": "#0d6efd"}}}},
            token_set="core",
        )

        entry = graph["color"]["brand"]["primary"]
        assert isinstance(entry, TokenEntry)
        assert entry.current.type == "color"
        assert entry.current.path == ("color", "brand", "primary")
        assert entry.current.token_set == "core"

    def test_own_type_wins(self):
        graph = build_graph(
            {"space": {"$type": "spacing", "ratio": {"$type": "number", "$value": "1.5"}}}
        )

        assert graph["space"]["ratio"].current.type == "number"

    def test_legacy_keys(self):
        graph = build_graph(
            {"space": {"sm": {"type": "spacing", "value": "8", "description": "Small"}}}
        )

        token = graph["space"]["sm"].current
        assert (token.type, token.value, token.description) == ("spacing", "8", "Small")

    def test_group_named_value(self):
        graph = build_graph({"font": {"value": {"$type": "number", "$value": "1"}}})

        assert isinstance(graph["font"]["value"], TokenEntry)

    def test_group_metadata_is_skipped(self):
        graph = build_graph({"color": {"$description": "Colors", "red": {"$value": "#f00"}}})

        assert list(graph["color"]) == ["red"]

    def test_walk_in_declaration_order(self):
        graph = build_graph({"b": {"$value": "1"}, "a": {"x": {"$value": "2"}}})

        assert [e.path for e in walk_graph(graph)] == [("b",), ("a", "x")]


class TestMergeGraphs:
    def test_later_graphs_override(self):
        base = build_graph({"color": {"red": {"$value": "#f00"}, "blue": {"$value": "#00f"}}})
        override = build_graph({"color": {"red": {"$value": "#e00"}}})

        merged = merge_graphs([base, override])

        assert merged["color"]["red"].current.value == "#e00"
        assert merged["color"]["blue"].current.value == "#00f"

    def test_inputs_are_not_mutated(self):
        base = build_graph({"color": {"red": {"$value": "#f00"}}})
        override = build_graph({"color": {"blue": {"$value": "#00f"}}})

        merge_graphs([base, override])

        assert list(base["color"]) == ["red"]


class TestLoadFiles:
    def test_nested_set_name(self, tmp_path: Path):
        _write(tmp_path / "brand" / "chassis.json", {"color": {"red": {"$value": "#f00"}}})

        graph = load_token_set(tmp_path, "brand/chassis")

        assert graph["color"]["red"].current.token_set == "brand/chassis"

    def test_missing_set(self, tmp_path: Path):
        with pytest.raises(LoadError, match="File not found"):
            load_token_set(tmp_path, "missing")

    def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "broken.json").write_text("{not json")

        with pytest.raises(LoadError, match="Invalid JSON"):
            load_token_set(tmp_path, "broken")

    def test_not_utf8(self, tmp_path: Path):
        (tmp_path / "latin.json").write_bytes(b'{"a": "\xff"}')

        with pytest.raises(LoadError, match="Not UTF-8 encoded"):
            load_token_set(tmp_path, "latin")

    def test_set_is_a_directory(self, tmp_path: Path):
        (tmp_path / "folder.json").mkdir()

        with pytest.raises(LoadError, match="Could not read"):
            load_token_set(tmp_path, "folder")

    def test_set_must_be_object(self, tmp_path: Path):
        _write(tmp_path / "list.json", [1, 2])

        with pytest.raises(LoadError, match="must be a JSON object"):
            load_token_set(tmp_path, "list")

    def test_load_themes(self, tmp_path: Path):
        _write(
            tmp_path / "$themes.json",
            [{"name": "light", "selectedTokenSets": {"core": "enabled"}}],
        )

        themes = load_themes(tmp_path / "$themes.json")

        assert [t.name for t in themes] == ["light"]

    def test_themes_must_be_list(self, tmp_path: Path):
        _write(tmp_path / "$themes.json", {"light": {}})

        with pytest.raises(ConfigurationError):
            load_themes(tmp_path / "$themes.json")


class TestTokenSource:
    def test_sets_are_read_once(self, tmp_path: Path):
        _write(tmp_path / "core.json", {"space": {"sm": {"$value": "8"}}})
        source = TokenSource(tmp_path)

        first = source.load("core")
        (tmp_path / "core.json").unlink()

        assert source.load("core") is first

    def test_merged_in_order(self, tmp_path: Path):
        _write(tmp_path / "a.json", {"space": {"sm": {"$value": "8"}}})
        _write(tmp_path / "b.json", {"space": {"sm": {"$value": "10"}}})
        source = TokenSource(tmp_path)

        merged = source.merged(["a", "b"])

        assert merged["space"]["sm"].current.value == "10"
        assert merged["space"]["sm"].current.token_set == "b"
