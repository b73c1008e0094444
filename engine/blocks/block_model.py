from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from engine.blocks import attachment
from engine.blocks.attachment import SnapResult
from engine.blocks.block_registry import BlockRegistry
from engine.blocks.geometry import Vector2, VectorLike
from engine.blocks.socket_model import Socket
from engine.blocks.socket_types import ROOT_SOCKET_INDEX, SocketSpec
from engine.utils.logging.logger import log_info


class Block(ABC):
    """积木基类：程序树中的一个节点，独占一组有序插槽。

    - 插槽 0 为根插槽，只用于挂到父积木上；
    - 其余插槽挂载子积木，"子树"即自身加上经由非根插槽可达的全部积木；
    - 具体变体通过 `SOCKET_LAYOUT` 声明插槽布局，并实现 `get_code()`。
    """

    BLOCK_ID_PREFIX: str = "block"
    SOCKET_LAYOUT: Tuple[SocketSpec, ...] = ()

    def __init__(
        self,
        registry: BlockRegistry,
        position: VectorLike = (0.0, 0.0),
        *,
        container_scale: float = 1.0,
        leave_clone: bool = False,
        block_id: str = "",
    ) -> None:
        self.registry = registry
        self.id = block_id or registry.gen_id(self.BLOCK_ID_PREFIX)
        self.position = Vector2.of(position)
        # 容器提供的坐标缩放系数：插槽相对偏移 × 该系数 = 画布偏移
        self.container_scale = float(container_scale)
        # 调色板积木被拖起时会在原处留下一个可复用的副本
        self.leave_clone = bool(leave_clone)

        self.sockets: List[Socket] = [
            Socket(
                registry,
                self.id,
                index,
                spec.name,
                spec.socket_kind,
                spec.connection_kind,
                spec.offset,
            )
            for index, spec in enumerate(self.build_socket_layout())
        ]
        assert self.sockets, f"积木 {type(self).__name__} 至少需要一个插槽（索引0为根插槽）"

        registry.register(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id} @ ({self.position.x:.1f}, {self.position.y:.1f}))"

    def build_socket_layout(self) -> Sequence[SocketSpec]:
        return self.SOCKET_LAYOUT

    # -------- 插槽查询 --------
    @property
    def root_socket(self) -> Socket:
        return self.sockets[ROOT_SOCKET_INDEX]

    def socket(self, name: str) -> Optional[Socket]:
        for socket in self.sockets:
            if socket.name == name:
                return socket
        return None

    def child_block(self, socket_name: str) -> Optional["Block"]:
        socket = self.socket(socket_name)
        if socket is None or socket.is_root:
            return None
        return socket.get_attached_block()

    def parent_block(self) -> Optional["Block"]:
        return self.root_socket.get_attached_block()

    def root_block(self) -> "Block":
        """沿根插槽一路向上，返回所在程序树的最顶层积木。"""
        current: Block = self
        visited: Set[str] = {current.id}
        parent = current.parent_block()
        while parent is not None and parent.id not in visited:
            visited.add(parent.id)
            current = parent
            parent = current.parent_block()
        return current

    # -------- 子树 --------
    def descending_blocks(self) -> List["Block"]:
        """自身 + 经由非根插槽递归可达的全部积木（每个积木只出现一次）。"""
        result: List[Block] = []
        self._collect_descending(result, set())
        return result

    def _collect_descending(self, result: List["Block"], visited: Set[str]) -> None:
        if self.id in visited:
            return
        visited.add(self.id)
        result.append(self)
        for socket in self.sockets[ROOT_SOCKET_INDEX + 1:]:
            child = socket.get_attached_block()
            if child is None or child is self:
                continue
            child._collect_descending(result, visited)

    def apply_delta(self, delta: VectorLike) -> None:
        offset = Vector2.of(delta)
        for block in self.descending_blocks():
            block.position = block.position + offset

    # -------- 层级变化 --------
    def detach(self) -> None:
        """从父积木上断开；断开后通知原父积木一次。"""
        previous_block = self.parent_block()
        self.root_socket.detach()
        if previous_block is not None:
            previous_block.hierarchy_changed()

    def hierarchy_changed(self) -> None:
        parent = self.parent_block()
        if parent is not None:
            parent.hierarchy_changed()

    def try_attach_in_some_connection(self, block: "Block") -> bool:
        """用子树中任意一个插槽尝试与目标积木对接，成功即停止。"""
        return self.snap_in_some_connection(block) is not None

    def snap_in_some_connection(self, block: "Block") -> Optional[SnapResult]:
        """同 `try_attach_in_some_connection`，但返回吸附结果（被平移的积木与位移）。"""
        if block is self:
            return None

        descending_blocks = self.descending_blocks()
        if any(candidate is block for candidate in descending_blocks):
            return None

        for a_block in descending_blocks:
            for socket in a_block.sockets:
                result = attachment.snap_socket_to_block(socket, block)
                if result is None:
                    continue
                # 通知新连接中的父侧积木，由其沿根插槽继续向上传递
                link_parent = socket.get_attached_block() if socket.is_root else a_block
                log_info("[积木] {} 已与 {} 对接，父侧为 {}", self.id, block.id, link_parent.id if link_parent else "-")
                if link_parent is not None:
                    link_parent.hierarchy_changed()
                return result
        return None

    # -------- 复制 --------
    def copy_params(self) -> Dict[str, Any]:
        """变体构造参数（用于 `clone`）；无额外参数的变体无需覆盖。"""
        return {}

    def clone(self) -> "Block":
        """复制当前积木本身（不含子树），副本处于未连接状态。"""
        return type(self)(
            self.registry,
            self.position,
            container_scale=self.container_scale,
            leave_clone=self.leave_clone,
            **self.copy_params(),
        )

    @abstractmethod
    def get_code(self) -> str:
        """把本积木（及其挂载的子积木）渲染为程序文本。"""
