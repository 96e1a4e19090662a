"""Tracker observations, per-frame debug records and their console reports."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import TextIO

Vector = tuple[float, ...]
Matrix3 = tuple[Vector, Vector, Vector]

_IDENTITY: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))

_BANNER = "################################################################################"
_RULE = "--------------------------------------------------------------------------------"
_TABLE_RULE = "|---------------------------------|-----------------------------------|"


@dataclass
class TrackerArmor:
    """One armor observation handed to the tracker."""

    type: str = ""
    yaw: float = 0.0
    position: Vector = (0.0, 0.0, 0.0)
    rotation_matrix: Matrix3 = _IDENTITY


@dataclass
class DebugData:
    """Everything the tracker records while processing one frame."""

    frame_id: int = 0
    state_begin: Vector = ()
    state_predicted: Vector = ()
    state_final: Vector = ()
    observations: list[TrackerArmor] = field(default_factory=list)
    hypotheses: list[tuple[str, Vector]] = field(default_factory=list)
    match_success: bool = False
    match_type: str = ""
    match_details: str = ""
    match_score: float = 0.0
    final_observation: Vector = (0.0, 0.0, 0.0)
    pos_innovation: Vector = (0.0, 0.0)
    yaw_innovation: float = 0.0
    decision_pos: str = ""
    decision_yaw: str = ""
    calculated_vyaw: float = 0.0


def _deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def _norm(vec: Vector) -> float:
    return math.sqrt(sum(v * v for v in vec))


class Debugger:
    """Writes raw per-frame logs and performance summaries for the tracker.

    Once a raw log has been written, numbers switch to fixed notation with
    six decimals for every later report, as a shared console stream would.
    """

    def __init__(
        self,
        performance_mode: bool = False,
        raw_mode: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.performance_mode = performance_mode
        self.raw_mode = raw_mode
        self.stream = stream
        self._fixed = False

    def _fmt(self, value: float) -> str:
        return f"{value:.6f}" if self._fixed else f"{value:g}"

    def _vector(self, values: Vector) -> str:
        texts = [self._fmt(v) for v in values]
        if not texts:
            return ""
        width = max(len(t) for t in texts)
        return " ".join(t.rjust(width) for t in texts)

    def _emit(self, text: str) -> str:
        out = self.stream if self.stream is not None else sys.stdout
        out.write(text)
        out.flush()
        return text

    def log_raw_info(self, data: DebugData) -> str:
        """Write the step-by-step raw log of one frame; return what was written."""
        if not self.raw_mode:
            return ""
        parts: list[str] = [
            "\n\n\n" + _BANNER,
            f"\n#############################  帧 {data.frame_id} 开始 (原始日志) "
            "#################################",
            "\n" + _BANNER,
            "\n[步骤 1] 帧开始状态\n",
            _RULE + "\n",
        ]
        self._fixed = True
        f = self._fmt

        if data.state_begin:
            parts.append(f"  - 状态向量: {self._vector(data.state_begin)}\n")
            parts.append(f"  - 姿态角 Yaw (角度): {f(_deg(data.state_begin[2]))}°\n")
        else:
            parts.append("  - (状态未初始化)\n")

        parts.append("\n[步骤 2] 状态预测\n")
        parts.append(_RULE + "\n")
        if data.state_predicted:
            parts.append(f"  - 预测后状态向量: {self._vector(data.state_predicted)}\n")
            parts.append(f"  - 预测后姿态角 Yaw (角度): {f(_deg(data.state_predicted[2]))}°\n")
        else:
            parts.append("  - (状态未初始化)\n")

        parts.append("\n[步骤 3] 观测处理\n")
        parts.append(_RULE + "\n")
        if not data.observations:
            parts.append("  - 接收到 0 个装甲板。\n")
        else:
            parts.append(f"  - 接收到 {len(data.observations)} 个装甲板:\n")
            for number, armor in enumerate(data.observations, start=1):
                parts.append(
                    f"    - 装甲板 {number} ({armor.type}): 位置=[{self._vector(armor.position)}], "
                    f"偏航角(弧度)={f(armor.yaw)} (角度): {f(_deg(armor.yaw))}°\n"
                )

        parts.append("\n[步骤 4] 数据关联与匹配\n")
        parts.append(_RULE + "\n")
        if data.match_success:
            obs = data.final_observation
            parts.append(data.match_details + "\n")
            parts.append(
                f"  - 最终生成高质量观测值: 位置=[{self._vector(tuple(obs[:2]))}], "
                f"偏航角(弧度)={f(obs[2])} (角度): {f(_deg(obs[2]))}°\n"
            )
        else:
            parts.append("  - 匹配失败或无观测。\n")

        parts.append("\n[步骤 5] 滤波器更新\n")
        parts.append(_RULE + "\n")
        if data.match_success:
            parts.append("  - 新息 (观测 - 预测):\n")
            parts.append(f"    - 位置误差: {f(_norm(data.pos_innovation))} m\n")
            parts.append(
                f"    - 偏航角误差: {f(_deg(data.yaw_innovation))}° ({f(data.yaw_innovation)} rad)\n"
            )
            parts.append(f"  - 决策: 位置 {data.decision_pos}, 偏航角 {data.decision_yaw}\n")
            parts.append(
                f"  - 角速度计算: 基于连续观测，vyaw = {f(_deg(data.calculated_vyaw))} °/s\n"
            )
        else:
            parts.append("  - (跳过更新)\n")

        parts.append("\n[步骤 6] 帧结束状态\n")
        parts.append(_RULE + "\n")
        if data.state_final:
            parts.append(f"  - 最终状态向量: {self._vector(data.state_final)}\n")
            parts.append(f"  - 最终姿态角 Yaw (角度): {f(_deg(data.state_final[2]))}°\n")
        else:
            parts.append("  - (状态未初始化)\n")

        return self._emit("".join(parts))

    def log_performance_summary(self, data: DebugData) -> str:
        """Write a compact table of one frame's tracking quality; return it."""
        if not self.performance_mode:
            return ""
        f = self._fmt
        parts: list[str] = [f"\n\n--- [性能摘要] 帧: {data.frame_id} ---\n"]

        if not data.match_success:
            if not data.observations:
                parts.append("| 状态: 跟丢 (无观测)\n")
            else:
                parts.append("| 状态: 跟丢 (无有效组合)\n")
            s = data.state_final
            if s:
                parts.append(
                    f"| 最终状态 (预测): x={f(s[0])}, z={f(s[1])}, yaw={f(_deg(s[2]))}°"
                    f", vx={f(s[3])}, vz={f(s[4])}, vyaw={f(_deg(s[5]))}°/s\n"
                )
            return self._emit("".join(parts))

        s = data.state_final

        def cell(value: float) -> str:
            return f(value).rjust(25) + " |\n"

        parts.append(f"| 匹配决策: {data.match_details} (Score: {f(data.match_score)})\n")
        parts.append(_TABLE_RULE + "\n")
        parts.append("|           指标 (单位)           |             数值                  |\n")
        parts.append(_TABLE_RULE + "\n")
        parts.append("| 位置预测误差 (m)                | " + cell(_norm(data.pos_innovation)))
        parts.append("| 角度预测误差 (°)                | " + cell(_deg(data.yaw_innovation)))
        parts.append(_TABLE_RULE + "\n")
        parts.append("| 瞬时角速度计算 (°/s)            | " + cell(_deg(data.calculated_vyaw)))
        parts.append("| 平滑后角速度估计 (°/s)          | " + cell(_deg(s[5])))
        parts.append(_TABLE_RULE + "\n")
        parts.append(f"| 最终位置估计 (x, z)             | {f(s[0])}, {f(s[1])}\n")
        parts.append("| 最终姿态估计 (°)                | " + cell(_deg(s[2])))
        parts.append(f"| 最终线速度估计 (vx, vz)         | {f(s[3])}, {f(s[4])}\n")
        parts.append(_TABLE_RULE + "\n")
        return self._emit("".join(parts))