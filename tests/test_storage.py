"""Tests for TOML load/save."""

import logging
import os
import textwrap

import pytest

from breadboard import storage
from breadboard.errors import ParseError
from breadboard.graph import GraphStore
from breadboard.storage import (
    from_document,
    list_board_files,
    load_or_new,
    read_file,
    to_document,
    write_file,
)


def write_text(path, text):
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return str(path)


def outline(store):
    """Names and topology, independent of ids."""
    result = []
    for place in store.places.values():
        affs = []
        for a in store.affordances_of(place.id):
            target = store.places[a.connects_to].name if a.connects_to else None
            affs.append((a.name, target))
        result.append((place.name, affs))
    return result


class TestRoundTrip:
    def test_save_and_load(self, board, tmp_path):
        path = str(tmp_path / "autopay.toml")
        write_file(path, board.store)
        loaded = read_file(path)
        assert loaded.name == "Autopay"
        assert loaded.created == "2025-01-15T10:00:00+00:00"
        assert outline(loaded) == outline(board.store)
        assert loaded.place_ids() == board.store.place_ids()

    def test_group_survives(self, tmp_path):
        store = GraphStore(name="G")
        store.add_place("Home", group="Main")
        path = str(tmp_path / "g.toml")
        write_file(path, store)
        assert next(iter(read_file(path).places.values())).group == "Main"

    def test_document_omits_empty_fields(self, board):
        doc = to_document(board.store)
        confirm = doc["places"][2]
        assert "group" not in confirm
        assert "connects_to" not in confirm["affordances"][0]
        assert "places" not in to_document(GraphStore(name="Empty"))

    def test_empty_board(self, tmp_path):
        path = str(tmp_path / "empty.toml")
        write_file(path, GraphStore(name="Empty"))
        loaded = read_file(path)
        assert loaded.name == "Empty"
        assert loaded.places == {}


class TestLoadRules:
    def test_connection_by_name(self, tmp_path):
        path = write_text(
            tmp_path / "b.toml",
            """
            name = "Hand written"

            [[places]]
            name = "Home"

            [[places.affordances]]
            name = "Settings"
            connects_to = "Preferences"

            [[places]]
            name = "Preferences"
            """,
        )
        store = read_file(path)
        assert outline(store) == [("Home", [("Settings", "Preferences")]), ("Preferences", [])]

    def test_dangling_connection_dropped(self, tmp_path, caplog):
        path = write_text(
            tmp_path / "b.toml",
            """
            name = "Dangling"

            [[places]]
            id = "p1"
            name = "Home"

            [[places.affordances]]
            id = "a1"
            name = "Nowhere"
            connects_to = "p9"
            """,
        )
        with caplog.at_level(logging.WARNING, logger="breadboard.storage"):
            store = read_file(path)
        assert store.affordance("a1").connects_to is None
        assert "Nowhere" in caplog.text

    def test_numeric_ids(self, tmp_path):
        path = write_text(
            tmp_path / "b.toml",
            """
            name = "Numbers"

            [[places]]
            id = 1
            name = "One"

            [[places.affordances]]
            id = 10
            name = "Loop"
            connects_to = 1
            """,
        )
        store = read_file(path)
        assert store.place_ids() == ["1"]
        assert store.affordance("10").connects_to == "1"

    def test_missing_ids_are_generated(self):
        store = from_document({"name": "B", "places": [{"name": "A"}, {"name": "B"}]})
        assert len(set(store.place_ids())) == 2

    def test_reused_affordance_id_across_places(self):
        store = from_document(
            {
                "name": "B",
                "places": [
                    {"id": "p1", "name": "A", "affordances": [{"id": "x", "name": "Go"}]},
                    {"id": "p2", "name": "B", "affordances": [{"id": "x", "name": "Go"}]},
                ],
            }
        )
        assert len(store.affordances) == 2
        assert store.place("p1").affordance_ids == ["x"]
        assert store.place("p2").affordance_ids != ["x"]

    def test_duplicate_place_id(self):
        with pytest.raises(ParseError):
            from_document(
                {"name": "B", "places": [{"id": "p", "name": "A"}, {"id": "p", "name": "B"}]}
            )

    def test_duplicate_affordance_id_in_place(self):
        with pytest.raises(ParseError):
            from_document(
                {
                    "name": "B",
                    "places": [
                        {
                            "name": "A",
                            "affordances": [{"id": "x", "name": "1"}, {"id": "x", "name": "2"}],
                        }
                    ],
                }
            )

    @pytest.mark.parametrize(
        "doc",
        [
            {},
            {"name": 5},
            {"name": "B", "places": "nope"},
            {"name": "B", "places": [{"id": "p"}]},
            {"name": "B", "places": [{"name": "A", "affordances": [{"name": "x", "connects_to": 1.5}]}]},
        ],
    )
    def test_invalid_documents(self, doc):
        with pytest.raises(ParseError):
            from_document(doc)

    def test_toml_datetime_created(self, tmp_path):
        path = write_text(
            tmp_path / "b.toml",
            """
            name = "Dated"
            created = 2025-01-15T10:00:00Z
            """,
        )
        assert read_file(path).created == "2025-01-15T10:00:00+00:00"

    def test_invalid_toml(self, tmp_path):
        path = write_text(tmp_path / "bad.toml", "name = [unterminated\n")
        with pytest.raises(ParseError):
            read_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_file(str(tmp_path / "missing.toml"))


class TestAtomicSave:
    def test_failed_replace_keeps_old_file(self, board, tmp_path, monkeypatch):
        path = tmp_path / "board.toml"
        path.write_text('name = "Old"\n', encoding="utf-8")

        def fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(storage.os, "replace", fail)
        with pytest.raises(OSError):
            write_file(str(path), board.store)
        assert path.read_text(encoding="utf-8") == 'name = "Old"\n'
        assert os.listdir(tmp_path) == ["board.toml"]

    def test_overwrite(self, board, tmp_path):
        path = str(tmp_path / "board.toml")
        write_file(path, GraphStore(name="First"))
        write_file(path, board.store)
        assert read_file(path).name == "Autopay"
        assert os.listdir(tmp_path) == ["board.toml"]


class TestHelpers:
    def test_load_or_new_missing_file(self, tmp_path):
        store, error = load_or_new(str(tmp_path / "checkout.toml"))
        assert error is None
        assert store.name == "checkout"
        assert store.places == {}

    def test_load_or_new_broken_file(self, tmp_path):
        path = write_text(tmp_path / "broken.toml", "= nope\n")
        store, error = load_or_new(path)
        assert store.places == {}
        assert error.startswith("Could not open broken.toml")

    def test_load_or_new_existing(self, board, tmp_path):
        path = str(tmp_path / "a.toml")
        write_file(path, board.store)
        store, error = load_or_new(path)
        assert error is None
        assert len(store.places) == 3

    def test_list_board_files(self, tmp_path):
        for name in ["b.toml", "a.toml", "notes.txt"]:
            (tmp_path / name).write_text("", encoding="utf-8")
        (tmp_path / "dir.toml").mkdir()
        assert list_board_files(str(tmp_path)) == ["a.toml", "b.toml"]

    def test_list_board_files_missing_dir(self, tmp_path):
        assert list_board_files(str(tmp_path / "nope")) == []
