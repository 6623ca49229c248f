import math

import pytest

from puppet.frame import (
    FIELDS, FieldKind, FrameError, FrameUpdate, default_frame, get_path,
)


def test_default_frame_wire_shape():
    d = default_frame().to_dict()
    assert set(d) == {"face", "bones", "handLeft", "handRight"}
    assert d["face"]["orientation"] == {"look": [0, 0, -1], "up": [0, -1, 0], "right": [1, 0, 0]}
    assert d["face"]["eyes"]["left"] == {
        "openness": 1.0, "iris": {"thetaX": 0, "thetaY": 0}, "blink": False,
    }
    assert d["face"]["mouth"] == {"smileness": 0, "openness": 0}
    assert d["bones"]["armLeft"] == 110
    assert d["bones"]["elbowLeft"] == -180
    assert d["bones"]["wristLeft"] == -180
    assert d["bones"]["armRight"] == 70
    assert d["bones"]["uWristRight"] == [0, 0, 1]
    assert d["handLeft"] == {"fingers": 0b11111, "roll": 0}
    assert d["handRight"] == {"fingers": 0b11111, "roll": 0}


def test_field_table_covers_every_leaf():
    frame = default_frame()
    for spec in FIELDS:
        get_path(frame, spec.attr)

    kinds = [spec.kind for spec in FIELDS]
    assert kinds.count(FieldKind.VECTOR) == 3
    assert kinds.count(FieldKind.AXIS) == 8
    assert kinds.count(FieldKind.CATEGORICAL) == 2
    assert kinds.count(FieldKind.DERIVED) == 2
    assert kinds.count(FieldKind.SCALAR) == 6 + 2 + 8 + 2


def test_default_frames_are_independent():
    a, b = default_frame(), default_frame()
    a.face.eyes.left.openness = 0.0
    assert b.face.eyes.left.openness == 1.0


def test_from_payload_records_sections_and_leaves():
    update = FrameUpdate.from_payload({
        "bones": {"body": 12, "uHead": [1, 0, 0]},
        "handRight": {"fingers": 0b00001, "roll": -0.5},
    })
    assert update.sections == {"bones", "handRight"}
    assert update.values[("bones", "body")] == 12.0
    assert update.values[("bones", "u_head")] == (1.0, 0.0, 0.0)
    assert update.values[("hand_right", "fingers")] == 1
    assert update.values[("hand_right", "roll")] == -0.5
    assert update.rejected == []


def test_from_payload_ignores_blink_input():
    update = FrameUpdate.from_payload(
        {"face": {"eyes": {"left": {"openness": 0.9, "blink": True}}}})
    assert ("face", "eyes", "left", "blink") not in update.values
    assert update.values[("face", "eyes", "left", "openness")] == 0.9


def test_from_payload_drops_malformed_leaves():
    update = FrameUpdate.from_payload({
        "face": {
            "orientation": {"look": [0, 1], "up": [0, "a", 0], "right": [1, 0, 0]},
            "mouth": {"smileness": "big", "openness": math.nan},
            "eyes": {"left": {"openness": True}},
        },
        "handLeft": {"fingers": 3.5, "roll": None},
    })
    assert set(update.values) == {("face", "orientation", "right")}
    assert "face.orientation.look" in update.rejected
    assert "face.mouth.smileness" in update.rejected
    assert "handLeft.fingers" in update.rejected
    assert len(update.rejected) == 7


def test_section_that_is_not_an_object_counts_as_missing():
    update = FrameUpdate.from_payload({"face": 5, "bones": {}})
    assert update.sections == {"bones"}
    assert update.values == {}


@pytest.mark.parametrize("payload", [None, [], "ok", 3])
def test_non_object_payload_is_rejected(payload):
    with pytest.raises(FrameError):
        FrameUpdate.from_payload(payload)


def test_from_frame_is_complete():
    update = FrameUpdate.from_frame(default_frame())
    assert len(update.values) == len(FIELDS) - 2
    assert update.sections == {"face", "bones", "handLeft", "handRight"}


def test_integer_beyond_float_range_is_malformed():
    update = FrameUpdate.from_payload({"bones": {"body": 10**400, "head": 5, "uHead": [10**400, 0, 1]}})
    assert ("bones", "body") not in update.values
    assert ("bones", "u_head") not in update.values
    assert update.values[("bones", "head")] == 5.0
    assert update.rejected == ["bones.body", "bones.uHead"]
