import json

import pytest

from armorsight.framelog import log_frame, save_json
from armorsight.geometry import Point
from armorsight.matching import Armor


def _armor(armor_id=3, armor_type="long"):
    return Armor(
        id=armor_id,
        type=armor_type,
        center=Point(10.0, 20.0),
        position=(0.1, -0.2, 2.5),
        rotation_matrix=((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (-1.0, 0.0, 0.0)),
    )


def test_log_frame_appends_record_with_armor_fields():
    frames = []
    record = log_frame(frames, 7, [_armor()])
    assert frames == [record]
    assert record["frame"] == 7
    assert record["armors"] == [
        {
            "id": 3,
            "type": "long",
            "position": [0.1, -0.2, 2.5],
            "rotation_matrix": [[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]],
        }
    ]


def test_log_frame_records_empty_frame():
    frames = []
    log_frame(frames, 1, [])
    assert frames == [{"frame": 1, "armors": []}]


def test_log_frame_keeps_order_of_frames_and_armors():
    frames = []
    log_frame(frames, 1, [_armor(1, "short"), _armor(2, "long")])
    log_frame(frames, 2, [_armor(5)])
    assert [f["frame"] for f in frames] == [1, 2]
    assert [a["id"] for a in frames[0]["armors"]] == [1, 2]
    assert [a["type"] for a in frames[0]["armors"]] == ["short", "long"]


def test_save_json_round_trip(tmp_path):
    frames = []
    log_frame(frames, 4, [_armor()])
    log_frame(frames, 5, [])
    path = tmp_path / "frames.json"
    save_json(frames, path)
    with open(path, encoding="utf-8") as handle:
        assert json.load(handle) == frames


def test_save_json_uses_four_space_indent_and_sorted_keys(tmp_path):
    path = tmp_path / "out.json"
    save_json({"frame": 1, "armors": []}, path)
    text = path.read_text(encoding="utf-8")
    lines = text.splitlines()
    assert lines[1].startswith('    "armors"')
    assert text.index('"armors"') < text.index('"frame"')


def test_save_json_writes_non_ascii_verbatim(tmp_path):
    path = tmp_path / "u.json"
    save_json({"type": "主长轴"}, path)
    assert "主长轴" in path.read_text(encoding="utf-8")


def test_save_json_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        save_json([], tmp_path / "missing" / "frames.json")