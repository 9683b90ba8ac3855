import json

import pytest

import storage
from storage import CatalogEntry, Config, DataUnavailableError, SaveError


def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_creates_default_file(tmp_path):
    path = tmp_path / "config.json"

    config = storage.load_config(path)

    assert config == Config("boss_data.json", "default_save.json")
    assert json.loads(path.read_text(encoding="utf-8")) == storage.DEFAULT_CONFIG


def test_load_config_uses_working_directory_by_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    storage.load_config()

    assert (tmp_path / "config.json").exists()


def test_load_config_reads_existing_values(tmp_path):
    path = write_json(
        tmp_path / "config.json",
        {"checklist_path": "souls.json", "default_save": "run1.json", "theme": "dark"},
    )

    assert storage.load_config(path) == Config("souls.json", "run1.json")


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"checklist_path": "boss_data.json"},
        {"checklist_path": 3, "default_save": "default_save.json"},
    ],
)
def test_load_config_rejects_wrong_structure(tmp_path, payload):
    path = write_json(tmp_path / "config.json", payload)

    with pytest.raises(DataUnavailableError):
        storage.load_config(path)


def test_load_config_rejects_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DataUnavailableError) as excinfo:
        storage.load_config(path)
    assert excinfo.value.path == path


def test_load_config_reports_bootstrap_write_failure(tmp_path):
    path = tmp_path / "missing-dir" / "config.json"

    with pytest.raises(SaveError):
        storage.load_config(path)


def test_load_catalog(tmp_path):
    path = write_json(
        tmp_path / "boss_data.json",
        [
            {"region": "Forest", "bosses": ["Wolf King", "Old Oak"]},
            {"region": "Cave", "bosses": []},
        ],
    )

    assert storage.load_catalog(path) == [
        CatalogEntry("Forest", ("Wolf King", "Old Oak")),
        CatalogEntry("Cave", ()),
    ]


def test_load_catalog_missing_file_is_not_created(tmp_path):
    path = tmp_path / "boss_data.json"

    with pytest.raises(DataUnavailableError):
        storage.load_catalog(path)
    assert not path.exists()


@pytest.mark.parametrize(
    "payload",
    [
        {"region": "Forest", "bosses": []},
        ["Forest"],
        [{"bosses": ["Wolf King"]}],
        [{"region": "Forest", "bosses": "Wolf King"}],
        [{"region": "Forest", "bosses": ["Wolf King", 7]}],
    ],
)
def test_load_catalog_rejects_wrong_structure(tmp_path, payload):
    path = write_json(tmp_path / "boss_data.json", payload)

    with pytest.raises(DataUnavailableError):
        storage.load_catalog(path)


def test_load_completion_set_creates_empty_save(tmp_path):
    path = tmp_path / "default_save.json"

    assert storage.load_completion_set(path) == set()
    assert json.loads(path.read_text(encoding="utf-8")) == {"completed": []}


def test_load_completion_set_reads_pairs(tmp_path):
    path = write_json(
        tmp_path / "default_save.json",
        {"completed": [["Forest", "Wolf King"], ["Cave", "Bat Queen"], ["Forest", "Wolf King"]]},
    )

    assert storage.load_completion_set(path) == {("Forest", "Wolf King"), ("Cave", "Bat Queen")}


@pytest.mark.parametrize(
    "payload",
    [
        [["Forest", "Wolf King"]],
        {"completed": {"Forest": "Wolf King"}},
        {"completed": [["Forest"]]},
        {"completed": [["Forest", "Wolf King", "extra"]]},
        {"completed": [["Forest", None]]},
    ],
)
def test_load_completion_set_rejects_wrong_structure(tmp_path, payload):
    path = write_json(tmp_path / "default_save.json", payload)

    with pytest.raises(DataUnavailableError):
        storage.load_completion_set(path)


def test_write_completion_set_overwrites_whole_file(tmp_path):
    path = write_json(
        tmp_path / "default_save.json",
        {"completed": [["Forest", "Old Oak"], ["Forest", "Wolf King"]]},
    )

    storage.write_completion_set(path, {("Forest", "Wolf King"), ("Cave", "Bat Queen")})

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "completed": [["Cave", "Bat Queen"], ["Forest", "Wolf King"]]
    }
    assert storage.load_completion_set(path) == {("Forest", "Wolf King"), ("Cave", "Bat Queen")}


def test_write_completion_set_keeps_non_ascii_names(tmp_path):
    path = tmp_path / "default_save.json"

    storage.write_completion_set(path, {("Caelid", "Malenia, Blade of Miquella"), ("숲", "늑대 왕")})

    assert "늑대 왕" in path.read_text(encoding="utf-8")


def test_write_completion_set_failure(tmp_path):
    with pytest.raises(SaveError):
        storage.write_completion_set(tmp_path / "nope" / "save.json", set())
