"""插槽类型匹配系统

职责边界：
- 只回答"两个插槽在类型上能否对接"，不关心是否已占用、距离与层级关系；
- 占用/距离/父子方向等判定由 `engine.blocks.attachment` 统一完成。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from engine.blocks.geometry import Vector2, VectorLike


class SocketKind(str, Enum):
    """插槽公母类型：公头只与母口对接。"""

    MALE = "male"
    FEMALE = "female"


class ConnectionKind(str, Enum):
    """连接类别：语句串联 / 逻辑值 / 数值。"""

    REGULAR = "regular"
    LOGIC = "logic"
    NUMBER = "number"


ROOT_SOCKET_INDEX = 0


@dataclass(frozen=True)
class SocketSpec:
    """积木变体声明插槽布局时使用的静态描述。"""

    name: str
    socket_kind: SocketKind
    connection_kind: ConnectionKind
    offset: Vector2 = Vector2()

    @staticmethod
    def make(
        name: str,
        socket_kind: SocketKind,
        connection_kind: ConnectionKind,
        offset: VectorLike = (0.0, 0.0),
    ) -> "SocketSpec":
        return SocketSpec(name, socket_kind, connection_kind, Vector2.of(offset))


def are_kinds_complementary(first: SocketKind, second: SocketKind) -> bool:
    return first != second


def can_mate_sockets(
    first_kind: SocketKind,
    first_connection: ConnectionKind,
    second_kind: SocketKind,
    second_connection: ConnectionKind,
) -> bool:
    """判断两个插槽在类型上是否可以对接

    规则：
    1. 公母必须互补（公对母）
    2. 连接类别必须完全一致
    3. 不存在任何隐式兼容（数值口不接受逻辑值，反之亦然）
    """
    if not are_kinds_complementary(first_kind, second_kind):
        return False
    return first_connection == second_connection
