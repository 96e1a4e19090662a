# armorsight

Geometry, light-bar pairing and target tracking for armor plates seen by a
robot camera, plus the packed serial frames exchanged with the robot
controller. It needs nothing beyond the standard library.

## Modules

- `armorsight.status` – robot state enums (`EnemyColor`, `EnemyType`,
  `EnemyState`, `SpinHeading`, `AxesState`, `Balance`, `MDCamera`), the
  `RobotState` record, air-drag constants, `point_dist` and `color_from_name`
  (`"RED"` maps to `EnemyColor.RED`, anything else to `EnemyColor.BLUE`).
- `armorsight.geometry` – `Point` (vector arithmetic, `dot`, `norm`),
  `RotatedRect` (`points`, `bounding_rect`, `area`, and `from_points`, which
  raises `ValueError` if three corners do not form a rectangle) and `LightBar`,
  built with `LightBar.from_rotated_rect`.
- `armorsight.protocol` – `CommandId` and the little-endian packed frames
  `FrameHeader`, `RobotCtrlInfo` and `VisionInfo`, each with `pack()` and
  `unpack()`; `unpack()` raises `ValueError` on a wrong byte count.
- `armorsight.matching` – `Light`, `Armor`, `Strategy`, `determine_color`
  (red versus blue sum over BGR pixel rows), `make_light` (normalises a
  candidate rectangle or returns `None` if it is rejected), `dedupe_lights`
  and `match_armors`. `match_armors` greedily pairs light bars, best-aligned
  pair first, and computes each armor's number-ROI and eight PnP corner
  points. Pass `None` or `-1` to choose the strategy per pair, or a `Strategy`
  to force one. Progress is reported through the `logging` module.
- `armorsight.tracker` – `Tracker`, an adaptive alpha-beta filter over the
  vehicle centre, yaw, velocities and the two armor radii, with hypothesis
  matching of observed plates; also `normalize_angle` and
  `yaw_from_rotation_matrix`.
- `armorsight.diagnostics` – `TrackerArmor`, `DebugData` and `Debugger`,
  which writes the per-frame raw log and performance summary to a stream
  (standard output by default) and returns the text it wrote.
- `armorsight.framelog` – `log_frame` appends a frame's armors to a list of
  records; `save_json` writes data as JSON indented by four spaces.

## Example

```python
from armorsight.tracker import Tracker
from armorsight.diagnostics import TrackerArmor

tracker = Tracker()
armors = [
    TrackerArmor(type="long", yaw=0.0, position=(0.3, 0.1, 3.0)),
    TrackerArmor(type="short", yaw=1.57, position=(0.0, 0.1, 3.2)),
]
tracker.update(armors, dt=0.01, frame_id=1)
print(tracker.initialized, tracker.state)
print(tracker.predict_armor_position("long", prediction_time_ms=50.0))
```

The tracker locks on only once a frame holds both a `"long"` and a `"short"`
armor. Pass `raw_debug=True` or `performance_debug=True` to `Tracker` to get
the console reports.

Recording frames:

```python
from armorsight.framelog import log_frame, save_json

frames = []
log_frame(frames, 1, [])
save_json(frames, "frames.json")
```

## What it does not do

The package works on light bars and armor observations that are handed to
it. It does not read a camera or video, find contours in images, recognise
the numbers on armor plates, solve armor poses, or draw on frames. It does
not pick which vehicle to aim at, and it does not keep "long"/"short" armor
labels steady from one frame to the next. There is no command-line program.

## Tests

```
pip install -e .[test]
pytest
```