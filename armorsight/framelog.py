"""Recording detected armors frame by frame and saving them as JSON."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, MutableSequence, Sequence

from armorsight.matching import Armor

logger = logging.getLogger(__name__)


def _armor_record(armor: Armor) -> dict[str, Any]:
    return {
        "id": armor.id,
        "type": armor.type,
        "position": [float(v) for v in armor.position],
        "rotation_matrix": [[float(v) for v in row] for row in armor.rotation_matrix],
    }


def log_frame(
    frames: MutableSequence[dict[str, Any]],
    frame_number: int,
    armors: Sequence[Armor],
) -> dict[str, Any]:
    """Append one frame and its armors to ``frames``; return the new record.

    A frame without armors is still recorded, with an empty armor list.
    """
    record = {
        "frame": frame_number,
        "armors": [_armor_record(armor) for armor in armors],
    }
    frames.append(record)
    return record


def save_json(data: Any, filename: str | os.PathLike[str]) -> None:
    """Write ``data`` to ``filename`` as JSON indented by four spaces.

    Object keys are written in sorted order. Raises OSError if the file
    cannot be opened for writing.
    """
    with open(filename, "w", encoding="utf-8") as handle:
        handle.write(json.dumps(data, indent=4, sort_keys=True, ensure_ascii=False))
    logger.info("JSON data successfully saved to: %s", filename)