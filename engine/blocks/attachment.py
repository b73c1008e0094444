"""插槽连接仲裁与吸附判定

本模块是积木图唯一的变更入口：
- `link_sockets` / `unlink_socket`：原子地写入/清除连接两侧，并对两侧各触发一次通知；
- `find_snap_candidate`：在候选积木的插槽中寻找第一个满足全部条件的对接插槽；
- `snap_socket_to_block`：吸附（位置修正）+ 连接，返回本次吸附的结果。

结构条件（任何连接都必须满足）：
1. 公母互补、连接类别一致；
2. 两侧当前都未连接，且不在同一积木上；
3. 恰好一侧是根插槽（根-根、非根-非根都拒绝）；
4. 连接后不会让某个积木成为自己的祖先。

吸附额外要求：两插槽绝对位置距离严格小于吸附半径。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from engine.blocks.geometry import Vector2
from engine.blocks.socket_types import can_mate_sockets
from engine.configs.settings import settings

if TYPE_CHECKING:
    from engine.blocks.block_model import Block
    from engine.blocks.socket_model import Socket


@dataclass(frozen=True)
class SnapResult:
    """一次成功吸附：发起插槽、对端插槽、被平移的子积木及其位移。"""

    socket: "Socket"
    peer: "Socket"
    moved_block_id: str
    delta: Vector2


def _attach_verbose() -> bool:
    return bool(getattr(settings, "BLOCK_ATTACH_VERBOSE", False))


# ===== 结构判定 =====

def _parent_and_child(this: "Socket", other: "Socket") -> Tuple["Block", "Block"]:
    """返回 (父积木, 子积木)：持有根插槽的一侧是子积木。"""
    if this.is_root:
        return other.owner, this.owner
    return this.owner, other.owner


def would_create_cycle(parent_block: "Block", child_block: "Block") -> bool:
    return any(block is parent_block for block in child_block.descending_blocks())


def can_link_sockets(first: "Socket", second: "Socket") -> bool:
    """与距离无关的全部结构条件。"""
    if first is second or first.owner_id == second.owner_id:
        return False
    if first.is_attached() or second.is_attached():
        return False
    if not can_mate_sockets(first.socket_kind, first.connection_kind, second.socket_kind, second.connection_kind):
        return False
    if first.is_root == second.is_root:
        return False
    parent_block, child_block = _parent_and_child(first, second)
    return not would_create_cycle(parent_block, child_block)


# ===== 连接仲裁 =====

def link_sockets(first: "Socket", second: "Socket") -> bool:
    """在两个插槽之间建立双向连接。

    不满足结构条件时直接返回 False，两侧都不写入。
    """
    if not can_link_sockets(first, second):
        return False

    first._set_peer(second.ref)
    second._set_peer(first.ref)

    if _attach_verbose():
        print(f"[连接] {first.owner_id}[{first.name}] <-> {second.owner_id}[{second.name}]")

    first._notify_attachment_changed()
    second._notify_attachment_changed()
    return True


def unlink_socket(socket: "Socket") -> bool:
    """断开插槽当前连接，两侧各清除一次、各通知一次。"""
    peer_ref = socket.peer_ref
    if peer_ref is None:
        return False

    peer = socket.get_attached_socket()
    socket._set_peer(None)
    if peer is not None and peer.peer_ref == socket.ref:
        peer._set_peer(None)
    else:
        peer = None

    if _attach_verbose():
        print(f"[断开] {socket.owner_id}[{socket.name}] -x- {peer_ref.block_id}[{peer_ref.socket_index}]")

    socket._notify_attachment_changed()
    if peer is not None:
        peer._notify_attachment_changed()
    return True


# ===== 吸附判定 =====

def is_snap_pair_eligible(this: "Socket", other: "Socket", snap_radius: float) -> bool:
    if not can_mate_sockets(this.socket_kind, this.connection_kind, other.socket_kind, other.connection_kind):
        return False
    if not this.distance_to(other) < snap_radius:
        return False
    return can_link_sockets(this, other)


def find_snap_candidate(this: "Socket", candidate_block: "Block", snap_radius: Optional[float] = None) -> Optional["Socket"]:
    radius = float(settings.BLOCK_SNAP_RADIUS if snap_radius is None else snap_radius)
    for other in candidate_block.sockets:
        if is_snap_pair_eligible(this, other, radius):
            return other
    return None


def compute_snap_correction(this: "Socket", other: "Socket") -> Tuple["Block", Vector2]:
    """计算吸附位置修正：(需要整体移动的子积木, 位移)。

    子积木（根插槽所在一侧）连同其子树平移，使两插槽绝对位置完全重合。
    """
    if this.is_root:
        return this.owner, other.absolute_position() - this.absolute_position()
    return other.owner, this.absolute_position() - other.absolute_position()


def snap_socket_to_block(
    this: "Socket",
    candidate_block: "Block",
    snap_radius: Optional[float] = None,
) -> Optional[SnapResult]:
    other = find_snap_candidate(this, candidate_block, snap_radius)
    if other is None:
        return None

    moving_block, delta = compute_snap_correction(this, other)
    if _attach_verbose():
        print(
            f"[吸附] {this.owner_id}[{this.name}] -> {other.owner_id}[{other.name}]，"
            f"移动 {moving_block.id} 位移=({delta.x:.2f}, {delta.y:.2f})"
        )
    moving_block.apply_delta(delta)
    link_sockets(this, other)
    return SnapResult(socket=this, peer=other, moved_block_id=moving_block.id, delta=delta)


def try_attach_socket_with_block(
    this: "Socket",
    candidate_block: "Block",
    snap_radius: Optional[float] = None,
) -> bool:
    return snap_socket_to_block(this, candidate_block, snap_radius) is not None
