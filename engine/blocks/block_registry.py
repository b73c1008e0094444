from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, Optional

if TYPE_CHECKING:
    from engine.blocks.block_model import Block
    from engine.blocks.socket_model import Socket


@dataclass(frozen=True)
class SocketRef:
    """插槽的稳定引用：(积木ID, 插槽序号)。

    连接关系只保存这对标识，真正的对象通过 `BlockRegistry` 解析，
    避免积木之间形成互相持有的对象环。
    """

    block_id: str
    socket_index: int


class BlockRegistry:
    """积木注册表：全局唯一的 "积木ID → 积木" 映射。

    - 负责分配积木ID（`block_1`、`block_2` ...）；
    - 插槽间的连接以 `SocketRef` 形式存放，解析统一经过这里；
    - 不负责"是否已放置到画布"，那是 `Workspace` 的职责。
    """

    def __init__(self) -> None:
        self._blocks: Dict[str, "Block"] = {}
        self._next_id = 1

    def gen_id(self, prefix: str = "block") -> str:
        new_id = f"{prefix}_{self._next_id}"
        self._next_id += 1
        while new_id in self._blocks:
            new_id = f"{prefix}_{self._next_id}"
            self._next_id += 1
        return new_id

    def register(self, block: "Block") -> None:
        existing = self._blocks.get(block.id)
        if existing is not None and existing is not block:
            raise ValueError(f"积木ID重复: {block.id}")
        self._blocks[block.id] = block

    def unregister(self, block_id: str) -> Optional["Block"]:
        return self._blocks.pop(block_id, None)

    def get(self, block_id: str) -> Optional["Block"]:
        return self._blocks.get(block_id)

    def require(self, block_id: str) -> "Block":
        block = self._blocks.get(block_id)
        if block is None:
            raise KeyError(f"未注册的积木: {block_id}")
        return block

    def resolve_socket(self, ref: Optional[SocketRef]) -> Optional["Socket"]:
        if ref is None:
            return None
        block = self._blocks.get(ref.block_id)
        if block is None:
            return None
        if not 0 <= ref.socket_index < len(block.sockets):
            return None
        return block.sockets[ref.socket_index]

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def __iter__(self) -> Iterator["Block"]:
        return iter(list(self._blocks.values()))

    def __len__(self) -> int:
        return len(self._blocks)
