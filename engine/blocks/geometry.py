from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Vector2:
    """画布坐标系中的二维向量（位置与位移共用）。"""

    x: float = 0.0
    y: float = 0.0

    @staticmethod
    def of(value: "VectorLike") -> "Vector2":
        if isinstance(value, Vector2):
            return value
        x, y = value
        return Vector2(float(x), float(y))

    def __add__(self, other: "VectorLike") -> "Vector2":
        other_vec = Vector2.of(other)
        return Vector2(self.x + other_vec.x, self.y + other_vec.y)

    def __sub__(self, other: "VectorLike") -> "Vector2":
        other_vec = Vector2.of(other)
        return Vector2(self.x - other_vec.x, self.y - other_vec.y)

    def __mul__(self, factor: float) -> "Vector2":
        return Vector2(self.x * float(factor), self.y * float(factor))

    __rmul__ = __mul__

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def distance_to(self, other: "VectorLike") -> float:
        other_vec = Vector2.of(other)
        return math.hypot(self.x - other_vec.x, self.y - other_vec.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


VectorLike = Union[Vector2, Tuple[float, float]]


@dataclass(frozen=True)
class RectRegion:
    """轴对齐矩形区域，用作"有效落块区域"的默认命中测试。

    边界包含在内（与 Qt 的 QRectF.contains 对闭区间的处理一致）。
    """

    left: float
    top: float
    width: float
    height: float

    def contains(self, point: VectorLike) -> bool:
        p = Vector2.of(point)
        return (
            self.left <= p.x <= self.left + self.width
            and self.top <= p.y <= self.top + self.height
        )

    def __call__(self, point: VectorLike) -> bool:
        return self.contains(point)
