from __future__ import annotations

from typing import List

from engine.blocks.block_model import Block
from engine.blocks.block_registry import BlockRegistry
from engine.utils.logging.logger import log_info


class Workspace:
    """画布上已放置积木的有序集合。

    - 顺序即放置顺序，落块时按此顺序逐个尝试对接；
    - 只保存积木ID，对象统一经 `BlockRegistry` 解析；
    - 调色板里的模板积木不在这里，被拖入画布落下后才会加入。
    """

    def __init__(self, registry: BlockRegistry) -> None:
        self.registry = registry
        self._placed_ids: List[str] = []

    def __contains__(self, block: object) -> bool:
        if isinstance(block, Block):
            return block.id in self._placed_ids
        return block in self._placed_ids

    def __len__(self) -> int:
        return len(self._placed_ids)

    def contains(self, block: Block) -> bool:
        return block.id in self._placed_ids

    def place_subtree(self, block: Block) -> List[str]:
        """把积木及其子树放入工作区（已存在的保持原顺序），返回新加入的ID。"""
        newly_placed: List[str] = []
        for member in block.descending_blocks():
            if member.id in self._placed_ids:
                continue
            self._placed_ids.append(member.id)
            newly_placed.append(member.id)
        return newly_placed

    def remove_subtree(self, block: Block) -> List[str]:
        """从工作区移除积木及其子树（不销毁对象），返回被移除的ID。"""
        removed: List[str] = []
        member_ids = {member.id for member in block.descending_blocks()}
        kept: List[str] = []
        for block_id in self._placed_ids:
            if block_id in member_ids:
                removed.append(block_id)
            else:
                kept.append(block_id)
        self._placed_ids = kept
        return removed

    def delete_subtree(self, block: Block) -> List[str]:
        """删除积木及其整棵子树：从父积木断开、移出工作区并注销。"""
        block.detach()
        members = block.descending_blocks()
        self.remove_subtree(block)
        for member in members:
            self.registry.unregister(member.id)
        deleted_ids = [member.id for member in members]
        log_info("[工作区] 删除子树 {}（共 {} 个积木）", block.id, len(deleted_ids))
        return deleted_ids

    def placed_blocks(self) -> List[Block]:
        """按放置顺序返回当前已放置积木的快照。"""
        blocks: List[Block] = []
        for block_id in self._placed_ids:
            block = self.registry.get(block_id)
            if block is not None:
                blocks.append(block)
        return blocks

    def root_blocks(self) -> List[Block]:
        return [block for block in self.placed_blocks() if block.parent_block() is None]
