"""Alpha-beta tracker of a spinning vehicle with four armor plates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, TextIO

from armorsight.diagnostics import DebugData, Debugger, TrackerArmor, Vector

_MANEUVER = "机动模式"
_SMOOTH = "平滑模式"


def normalize_angle(angle: float) -> float:
    """Wrap an angle in radians into ``[-pi, pi]``."""
    return math.atan2(math.sin(angle), math.cos(angle))


def yaw_from_rotation_matrix(r: Sequence[Sequence[float]]) -> float:
    """Yaw about the vertical axis taken from a 3x3 rotation matrix."""
    return math.atan2(-r[2][0], r[0][0])


class _ArmorId(IntEnum):
    MAIN_LONG = 0
    MAIN_SHORT = 1
    SYM_LONG = 2
    SYM_SHORT = 3

    @property
    def is_long(self) -> bool:
        return self in (_ArmorId.MAIN_LONG, _ArmorId.SYM_LONG)


@dataclass(frozen=True)
class _Hypothesis:
    predicted: tuple[float, float, float]
    id: _ArmorId
    name: str


def _xz(armor: TrackerArmor) -> tuple[float, float]:
    return armor.position[0], armor.position[2]


def _dist(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class Tracker:
    """Adaptive alpha-beta tracker with hypothesis matching of armor plates.

    The state is ``[x, z, yaw, vx, vz, vyaw, r_long, r_short]``.
    """

    MANEUVER_THRESHOLD_POS = 0.1
    MANEUVER_THRESHOLD_YAW = 0.3
    MATCH_SCORE_THRESHOLD = 0.4
    YAW_WEIGHT = 0.5
    MIN_RADIUS = 0.15
    MAX_RADIUS = 0.35
    DEFAULT_LONG_RADIUS = 0.30
    DEFAULT_SHORT_RADIUS = 0.23

    def __init__(
        self,
        performance_debug: bool = False,
        raw_debug: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self._initialized = False
        self._x = [0.0] * 8
        # Smooth mode trusts the model, maneuver mode trusts the observation.
        self.alpha_pos_smooth, self.beta_pos_smooth = 0.4, 0.05
        self.alpha_yaw_smooth, self.beta_yaw_smooth = 0.4, 0.05
        self.alpha_pos_maneuver, self.beta_pos_maneuver = 0.8, 0.2
        self.alpha_yaw_maneuver, self.beta_yaw_maneuver = 0.8, 0.2
        self.alpha_r = 0.1
        self._last_seen_id = _ArmorId.MAIN_LONG
        self.frames_since_last_update = 0
        self._last_observed_y = 0.0
        self._has_last_observation = False
        self._last_observation_yaw = 0.0
        self.debugger = Debugger(performance_debug, raw_debug, stream)

    @property
    def state(self) -> Vector:
        """A copy of the current state vector."""
        return tuple(self._x)

    @property
    def initialized(self) -> bool:
        """Whether the tracker has locked on to a vehicle."""
        return self._initialized

    @property
    def last_observed_y(self) -> float:
        """Height coordinate of the most recent observation."""
        return self._last_observed_y

    def update(
        self, armors: Sequence[TrackerArmor], dt: float, frame_id: int
    ) -> DebugData | None:
        """Advance the filter by ``dt`` seconds using this frame's armors.

        Returns the frame's debug record, or None when nothing was done.
        """
        if dt <= 0:
            return None
        debug = DebugData(frame_id=frame_id)

        if not self._initialized:
            if len(armors) >= 2 and self._initialize(armors, debug):
                return debug
            return None

        debug.state_begin = self.state
        self._predict(dt)
        debug.state_predicted = self.state

        observation = self._process_observation(armors, debug)
        if observation is not None:
            self._update_filters(observation, dt, debug)
            self.frames_since_last_update = 0
        else:
            self.frames_since_last_update += 1
            self._has_last_observation = False

        debug.state_final = self.state
        self.debugger.log_raw_info(debug)
        self.debugger.log_performance_summary(debug)
        return debug

    def predict_armor_position(
        self, armor_type: str, prediction_time_ms: float
    ) -> tuple[float, float, float]:
        """Predicted ``(x, y, z)`` of the main long or short armor after a delay."""
        if not self._initialized:
            return (0.0, 0.0, 0.0)
        dt = prediction_time_ms / 1000.0
        x = self._x
        cx = x[0] + x[3] * dt
        cz = x[1] + x[4] * dt
        yaw = normalize_angle(x[2] + x[5] * dt)
        if armor_type == "long":
            r = x[6]
            ax, az = cx + r * math.cos(yaw), cz - r * math.sin(yaw)
        else:
            r = x[7]
            ax, az = cx + r * math.sin(yaw), cz + r * math.cos(yaw)
        return (ax, self._last_observed_y, az)

    def _initialize(self, armors: Sequence[TrackerArmor], debug: DebugData) -> bool:
        long_armor = short_armor = None
        for armor in armors:
            if armor.type == "long":
                long_armor = armor
            elif armor.type == "short":
                short_armor = armor
        if long_armor is None or short_armor is None:
            return False

        yaw_est = normalize_angle(long_armor.yaw)
        c1 = self._back_calculate_center(_xz(long_armor), yaw_est, _ArmorId.MAIN_LONG)
        short_yaw = normalize_angle(yaw_est + math.pi / 2.0)
        c2 = self._back_calculate_center(_xz(short_armor), short_yaw, _ArmorId.MAIN_SHORT)
        center = ((c1[0] + c2[0]) / 2.0, (c1[1] + c2[1]) / 2.0)

        self._x = [center[0], center[1], yaw_est, 0.0, 0.0, 0.0, 0.0, 0.0]
        self._x[6] = _dist(_xz(long_armor), center)
        self._x[7] = _dist(_xz(short_armor), center)
        self._swap_radii_if_needed()
        self._clamp_radii()

        self._initialized = True
        self._last_observed_y = (long_armor.position[1] + short_armor.position[1]) / 2.0
        self._last_observation_yaw = self._x[2]
        self._has_last_observation = True

        debug.state_begin = (0.0,) * 8
        debug.state_predicted = (0.0,) * 8
        debug.state_final = self.state
        self.debugger.log_raw_info(debug)
        self.debugger.log_performance_summary(debug)
        return True

    def _predict(self, dt: float) -> None:
        x = self._x
        x[0] += x[3] * dt
        x[1] += x[4] * dt
        x[2] = normalize_angle(x[2] + x[5] * dt)

    def _update_filters(
        self, observation: tuple[float, float, float], dt: float, debug: DebugData
    ) -> None:
        x = self._x
        pos_innov = (observation[0] - x[0], observation[1] - x[1])
        yaw_innov = normalize_angle(observation[2] - x[2])
        debug.pos_innovation = pos_innov
        debug.yaw_innovation = yaw_innov

        if math.hypot(*pos_innov) > self.MANEUVER_THRESHOLD_POS:
            alpha_pos, beta_pos = self.alpha_pos_maneuver, self.beta_pos_maneuver
            debug.decision_pos = _MANEUVER
        else:
            alpha_pos, beta_pos = self.alpha_pos_smooth, self.beta_pos_smooth
            debug.decision_pos = _SMOOTH

        if abs(yaw_innov) > self.MANEUVER_THRESHOLD_YAW:
            alpha_yaw = self.alpha_yaw_maneuver
            debug.decision_yaw = _MANEUVER
        else:
            alpha_yaw = self.alpha_yaw_smooth
            debug.decision_yaw = _SMOOTH

        x[0] += alpha_pos * pos_innov[0]
        x[1] += alpha_pos * pos_innov[1]
        x[3] += beta_pos / dt * pos_innov[0]
        x[4] += beta_pos / dt * pos_innov[1]
        x[2] = normalize_angle(x[2] + alpha_yaw * yaw_innov)

        if self._has_last_observation:
            vyaw = normalize_angle(observation[2] - self._last_observation_yaw) / dt
            x[5] = 0.7 * x[5] + 0.3 * vyaw
            debug.calculated_vyaw = vyaw
        else:
            x[5] = 0.0

        self._last_observation_yaw = observation[2]
        self._has_last_observation = True

    def _score(self, armor: TrackerArmor, hypo: _Hypothesis) -> float:
        pos_error = _dist(_xz(armor), hypo.predicted)
        yaw_error = abs(normalize_angle(armor.yaw - hypo.predicted[2]))
        return pos_error + self.YAW_WEIGHT * yaw_error

    def _process_observation(
        self, armors: Sequence[TrackerArmor], debug: DebugData
    ) -> tuple[float, float, float] | None:
        debug.observations = list(armors)
        if not armors:
            debug.match_success = False
            return None

        self._last_observed_y = armors[0].position[1]
        hypotheses = self._generate_hypotheses()
        debug.hypotheses.extend((h.name, h.predicted) for h in hypotheses)

        long_armor = short_armor = None
        if len(armors) >= 2:
            long_armor = next((a for a in armors if a.type == "long"), None)
            short_armor = next((a for a in armors if a.type == "short"), None)

        if long_armor is not None and short_armor is not None:
            debug.match_type = "双板匹配"
            best_score = 1e9
            best_long = best_short = None
            for h_long in (h for h in hypotheses if h.id.is_long):
                for h_short in (h for h in hypotheses if not h.id.is_long):
                    score = self._score(long_armor, h_long) + self._score(short_armor, h_short)
                    if score < best_score:
                        best_score, best_long, best_short = score, h_long, h_short
            if best_long is None or best_short is None:
                best_long, best_short = hypotheses[_ArmorId.MAIN_LONG], hypotheses[_ArmorId.MAIN_SHORT]

            debug.match_success = True
            debug.match_details = (
                f"观测 Long (Yaw: {math.degrees(long_armor.yaw):g}°) -> {best_long.name}\n"
                f"    观测 Short (Yaw: {math.degrees(short_armor.yaw):g}°) -> {best_short.name}"
            )
            debug.match_score = best_score

            c1 = self._back_calculate_center(_xz(long_armor), long_armor.yaw, best_long.id)
            c2 = self._back_calculate_center(_xz(short_armor), short_armor.yaw, best_short.id)
            s = (math.sin(c1[2]) + math.sin(c2[2])) / 2.0
            c = (math.cos(c1[2]) + math.cos(c2[2])) / 2.0
            observation = ((c1[0] + c2[0]) / 2.0, (c1[1] + c2[1]) / 2.0, math.atan2(s, c))

            r1 = _dist(_xz(long_armor), observation)
            r2 = _dist(_xz(short_armor), observation)
            self._x[6] = (1 - self.alpha_r) * self._x[6] + self.alpha_r * r1
            self._x[7] = (1 - self.alpha_r) * self._x[7] + self.alpha_r * r2
            self._swap_radii_if_needed()
            self._clamp_radii()
        else:
            armor = armors[0]
            debug.match_type = "单板匹配"
            wants_long = armor.type == "long"
            best_score = 1e9
            best = None
            for hypo in hypotheses:
                if hypo.id.is_long != wants_long:
                    continue
                score = self._score(armor, hypo)
                if score < best_score:
                    best_score, best = score, hypo
            if best is None:
                best = hypotheses[_ArmorId.MAIN_LONG if wants_long else _ArmorId.MAIN_SHORT]

            debug.match_success = True
            debug.match_details = (
                f"观测 {armor.type} (Yaw: {math.degrees(armor.yaw):g}°) -> {best.name}"
            )
            debug.match_score = best_score
            observation = self._back_calculate_center(_xz(armor), armor.yaw, best.id)
            self._last_seen_id = best.id

        debug.final_observation = observation
        return observation

    def _generate_hypotheses(self) -> list[_Hypothesis]:
        x = self._x
        cx, cz, yaw = x[0], x[1], x[2]
        r1, r2 = x[6], x[7]
        cos_y, sin_y = math.cos(yaw), math.sin(yaw)
        return [
            _Hypothesis((cx + r1 * cos_y, cz - r1 * sin_y, normalize_angle(yaw)),
                        _ArmorId.MAIN_LONG, "主长轴"),
            _Hypothesis((cx + r2 * sin_y, cz + r2 * cos_y, normalize_angle(yaw + math.pi / 2.0)),
                        _ArmorId.MAIN_SHORT, "主短轴"),
            _Hypothesis((cx - r1 * cos_y, cz + r1 * sin_y, normalize_angle(yaw - math.pi)),
                        _ArmorId.SYM_LONG, "对称长轴"),
            _Hypothesis((cx - r2 * sin_y, cz - r2 * cos_y, normalize_angle(yaw - math.pi / 2.0)),
                        _ArmorId.SYM_SHORT, "对称短轴"),
        ]

    def _back_calculate_center(
        self, p_armor: tuple[float, float], yaw_armor: float, armor_id: _ArmorId
    ) -> tuple[float, float, float]:
        if armor_id.is_long:
            r = self._x[6] if self._initialized else self.DEFAULT_LONG_RADIUS
        else:
            r = self._x[7] if self._initialized else self.DEFAULT_SHORT_RADIUS
        return (
            p_armor[0] + r * math.sin(yaw_armor),
            p_armor[1] + r * math.cos(yaw_armor),
            yaw_armor,
        )

    def _clamp_radii(self) -> None:
        for i in (6, 7):
            self._x[i] = max(self.MIN_RADIUS, min(self.MAX_RADIUS, self._x[i]))

    def _swap_radii_if_needed(self) -> None:
        if self._x[6] < self._x[7]:
            self._x[6], self._x[7] = self._x[7], self._x[6]