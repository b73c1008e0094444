from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional

from engine.blocks import attachment
from engine.blocks.block_registry import BlockRegistry, SocketRef
from engine.blocks.geometry import Vector2, VectorLike
from engine.blocks.socket_types import ROOT_SOCKET_INDEX, ConnectionKind, SocketKind

if TYPE_CHECKING:
    from engine.blocks.block_model import Block


AttachmentListener = Callable[["Socket"], None]


class Socket:
    """积木上的一个带类型的连接点。

    插槽的生命周期绑定在所属积木上；对端只以 `SocketRef` 保存，
    所有连接/断开都经由 `engine.blocks.attachment` 的仲裁函数完成。
    """

    def __init__(
        self,
        registry: BlockRegistry,
        owner_id: str,
        index: int,
        name: str,
        socket_kind: SocketKind,
        connection_kind: ConnectionKind,
        relative_position: VectorLike = (0.0, 0.0),
    ) -> None:
        self._registry = registry
        self.owner_id = owner_id
        self.index = int(index)
        self.name = name
        self.socket_kind = SocketKind(socket_kind)
        self.connection_kind = ConnectionKind(connection_kind)
        self.relative_position = Vector2.of(relative_position)
        self._peer: Optional[SocketRef] = None
        self._listeners: List[AttachmentListener] = []

    def __repr__(self) -> str:
        return (
            f"Socket({self.owner_id}[{self.index}] {self.name!r} "
            f"{self.socket_kind.value}/{self.connection_kind.value} peer={self._peer})"
        )

    # -------- 基本属性 --------
    @property
    def ref(self) -> SocketRef:
        return SocketRef(self.owner_id, self.index)

    @property
    def owner(self) -> "Block":
        return self._registry.require(self.owner_id)

    @property
    def is_root(self) -> bool:
        return self.index == ROOT_SOCKET_INDEX

    @property
    def peer_ref(self) -> Optional[SocketRef]:
        return self._peer

    def get_socket_type(self) -> SocketKind:
        return self.socket_kind

    def is_attached(self) -> bool:
        return self._peer is not None

    def get_attached_socket(self) -> Optional["Socket"]:
        return self._registry.resolve_socket(self._peer)

    def get_attached_block(self) -> Optional["Block"]:
        if self._peer is None:
            return None
        return self._registry.get(self._peer.block_id)

    # -------- 位置 --------
    def set_relative_position(self, relative_position: VectorLike) -> None:
        self.relative_position = Vector2.of(relative_position)

    def absolute_position(self) -> Vector2:
        """所属积木位置 + 相对偏移 × 容器缩放系数。"""
        owner = self.owner
        return owner.position + self.relative_position * owner.container_scale

    def distance_to(self, other: "Socket") -> float:
        return self.absolute_position().distance_to(other.absolute_position())

    # -------- 订阅 --------
    def subscribe(self, listener: AttachmentListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: AttachmentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------- 连接操作 --------
    def attach(self, peer_block: "Block", peer_socket: "Socket") -> bool:
        """与对端插槽建立双向连接；任一侧已占用或结构条件不满足时不做任何事。"""
        if peer_socket.owner_id != peer_block.id:
            return False
        return attachment.link_sockets(self, peer_socket)

    def detach(self) -> bool:
        """断开当前连接；未连接时不做任何事。"""
        return attachment.unlink_socket(self)

    def try_attach_with(self, candidate_block: "Block") -> bool:
        return attachment.try_attach_socket_with_block(self, candidate_block)

    # -------- 仅供 attachment 模块调用 --------
    def _set_peer(self, peer: Optional[SocketRef]) -> None:
        self._peer = peer

    def _notify_attachment_changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)
