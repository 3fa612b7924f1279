"""Tests for snapshot serialization and the persistence boundary."""

import json
import logging

import pytest

from outliner.config import DEFAULT_CONFIG, merge_configs
from outliner.outline.projects import ProjectContainer
from outliner.outline.serialize import (
    SnapshotError,
    deserialize_container,
    deserialize_document,
    serialize_container,
    serialize_document,
)
from outliner.server.persistence import (
    SNAPSHOT_VERSION,
    load_snapshot,
    load_store,
    save_snapshot,
    snapshot_path,
)
from tests.helpers import SequentialIds, make_store


@pytest.fixture
def populated():
    """A two-project store with nesting and links."""
    store, (a, b, c) = make_store("A", "B", "C")
    store.indent(b)
    store.add_manual_link(c, b)
    store.create_project("Second")
    store.create_child(store.root_id, "x")
    return store


class TestSerialize:
    def test_document_keys(self, populated):
        data = serialize_document(populated.document)
        assert set(data) == {"rootId", "nodes", "selectedId"}
        node = next(iter(data["nodes"].values()))
        assert set(node) == {"id", "name", "parentId", "children", "manualLinks"}

    def test_container_round_trip(self, populated):
        data = json.loads(json.dumps(serialize_container(populated.container)))
        restored = deserialize_container(data, generate=SequentialIds("r"))
        assert restored.current_project_id == populated.current_project_id
        for original in populated.container.iter_projects():
            assert restored.get(original.id) == original

    def test_node_order_is_kept(self, populated):
        data = serialize_document(populated.document)
        assert list(deserialize_document(data).nodes) == list(populated.document.nodes)

    @pytest.mark.parametrize(
        "data",
        [
            None,
            [],
            {},
            {"projects": {}},
            {"projects": {"p": {"name": "x"}}},
            {"projects": {"p": {"name": 3, "doc": {}}}},
            {"projects": {"p": {"name": "x", "doc": {"rootId": "r"}}}},
            {"projects": {"p": {"name": "x", "doc": {"rootId": "r", "nodes": {"r": {"name": "R"}}}}}},
            {
                "projects": {
                    "p": {
                        "name": "x",
                        "doc": {"rootId": "r", "nodes": {"r": {"id": "r", "children": "abc"}}},
                    }
                }
            },
        ],
    )
    def test_malformed_state_raises(self, data):
        with pytest.raises(SnapshotError):
            deserialize_container(data)

    def test_unknown_current_project_falls_back(self, populated):
        data = serialize_container(populated.container)
        data["currentProjectId"] = "gone"
        restored = deserialize_container(data)
        assert restored.current_project_id == next(iter(data["projects"]))


class TestSnapshotFiles:
    def test_snapshot_path(self, tmp_path):
        config = merge_configs(DEFAULT_CONFIG, {"storage": {"name": "mine"}})
        assert snapshot_path(config, tmp_path) == tmp_path / "mine.json"

    def test_save_and_load(self, populated, tmp_path):
        path = tmp_path / "nested" / "outline.json"
        save_snapshot(populated.container, path)
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["version"] == SNAPSHOT_VERSION
        assert "projects" in payload["state"]

        restored = load_snapshot(path)
        assert serialize_container(restored) == serialize_container(populated.container)

    def test_save_leaves_no_temp_files(self, populated, tmp_path):
        path = tmp_path / "outline.json"
        save_snapshot(populated.container, path)
        save_snapshot(populated.container, path)
        assert [p.name for p in tmp_path.iterdir()] == ["outline.json"]

    def test_missing_file_gives_default(self, tmp_path):
        container = load_snapshot(tmp_path / "absent.json")
        assert container.project_count() == 1
        assert container.current.name == "Project 1"

    def test_default_uses_configured_names(self, tmp_path):
        config = merge_configs(DEFAULT_CONFIG, {"projects": {"first_name": "Inbox"}})
        assert load_snapshot(tmp_path / "absent.json", config).current.name == "Inbox"

    @pytest.mark.parametrize("content", ["{not json", "[]", '{"state": {"projects": {}}}'])
    def test_corrupted_file_falls_back(self, tmp_path, caplog, content):
        path = tmp_path / "outline.json"
        path.write_text(content, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="outliner.server.persistence"):
            container = load_snapshot(path)
        assert container.project_count() == 1
        assert "ignoring unreadable snapshot" in caplog.text
        assert path.read_text(encoding="utf-8") == content

    def test_undecodable_file_falls_back(self, tmp_path, caplog):
        path = tmp_path / "outline.json"
        raw = b'{"state": "\xff\xfe broken"}'
        path.write_bytes(raw)
        with caplog.at_level(logging.WARNING, logger="outliner.server.persistence"):
            container = load_snapshot(path)
        assert container.project_count() == 1
        assert "ignoring unreadable snapshot" in caplog.text
        assert path.read_bytes() == raw

    def test_structurally_broken_document_falls_back(self, populated, tmp_path):
        state = serialize_container(populated.container)
        doc = next(iter(state["projects"].values()))["doc"]
        doc["nodes"][doc["rootId"]]["children"].append("ghost")
        path = tmp_path / "outline.json"
        path.write_text(json.dumps({"version": 1, "state": state}), encoding="utf-8")
        container = load_snapshot(path)
        assert container.project_count() == 1

    def test_bare_state_without_envelope(self, populated, tmp_path):
        path = tmp_path / "outline.json"
        path.write_text(json.dumps(serialize_container(populated.container)), encoding="utf-8")
        assert load_snapshot(path).project_count() == 2

    def test_load_store_applies_engine_settings(self, populated, tmp_path):
        path = tmp_path / "outline.json"
        save_snapshot(populated.container, path)
        config = merge_configs(DEFAULT_CONFIG, {"engine": {"history_limit": 1}})
        store = load_store(config, path)
        assert store.current_project_id == populated.current_project_id
        first = store.create_child(store.root_id, "one")
        store.create_child(store.root_id, "two")
        assert len(store.mutation_log) == 1
        assert first in store.nodes

    def test_load_store_saves_missing_snapshot(self, tmp_path):
        path = tmp_path / "data" / "outline.json"
        first = load_store(DEFAULT_CONFIG, path)
        assert path.exists()
        second = load_store(DEFAULT_CONFIG, path)
        assert second.current_project_id == first.current_project_id
        assert second.root_id == first.root_id
        assert list(second.nodes) == list(first.nodes)

    def test_load_store_keeps_corrupted_file(self, tmp_path):
        path = tmp_path / "outline.json"
        path.write_text("{not json", encoding="utf-8")
        load_store(DEFAULT_CONFIG, path)
        assert path.read_text(encoding="utf-8") == "{not json"


class TestDefaultContainer:
    def test_fresh_container_is_valid(self):
        container = ProjectContainer()
        data = serialize_container(container)
        assert deserialize_container(data).current.doc == container.current.doc
