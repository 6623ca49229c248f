from enum import Enum

from puppet.frame import FIELDS, SECTIONS, SECTION_ATTRS, FieldKind, FrameUpdate, PuppetFrame, set_path


class MergeGranularity(str, Enum):
    SECTION = "section"
    LEAF = "leaf"


def merge_frame(update: FrameUpdate, last: PuppetFrame, seed: PuppetFrame,
                granularity=MergeGranularity.SECTION) -> PuppetFrame:
    """
    Build a complete frame from a partial update.

    SECTION granularity:
        A section (face, bones, handLeft, handRight) the update omits is taken
        whole from `last`. A section the update supplies is used as given:
        its missing leaves are NOT taken from `last`. They fall back to the
        seed frame's values, so a face payload carrying only mouth data resets
        eyes and orientation to the seed pose for that frame.

    LEAF granularity:
        Every leaf the update omits is taken from `last`.

    Returns a new frame. Neither `last` nor `seed` is modified.
    """
    granularity = MergeGranularity(granularity)
    merged = last.copy()

    if granularity == MergeGranularity.SECTION:
        base = seed.copy()
        for section in SECTIONS:
            if section in update.sections:
                attr = SECTION_ATTRS[section]
                setattr(merged, attr, getattr(base, attr))

    for spec in FIELDS:
        if spec.kind != FieldKind.DERIVED and spec.attr in update.values:
            set_path(merged, spec.attr, update.values[spec.attr])

    return merged
