from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from engine.blocks.block_model import Block
from engine.blocks.geometry import Vector2, VectorLike
from engine.blocks.workspace import Workspace
from engine.configs.settings import settings
from engine.utils.logging.logger import log_print, log_warn


CanvasRegionTest = Callable[[Vector2], bool]


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PLACED = "placed"
    DELETED = "deleted"


class CanvasLayer(str, Enum):
    """积木所在的显示层：拖拽中置于浮动层，落下后回到画布。"""

    FLOATING = "floating"
    CANVAS = "canvas"


@dataclass(frozen=True)
class DragBeganEvent:
    block_id: str


@dataclass(frozen=True)
class DragMovedEvent:
    pointer: Vector2


@dataclass(frozen=True)
class DragEndedEvent:
    pointer: Vector2


@dataclass(frozen=True)
class BlockClonedAction:
    source_block_id: str
    clone_block_id: str


@dataclass(frozen=True)
class ReparentBlockAction:
    """把积木移到指定显示层，保持其画布绝对位置不变。"""

    block_id: str
    layer: CanvasLayer


@dataclass(frozen=True)
class RaiseBlocksAction:
    block_ids: Tuple[str, ...]


@dataclass(frozen=True)
class SetDragPresentationAction:
    block_ids: Tuple[str, ...]
    enabled: bool


@dataclass(frozen=True)
class BlocksMovedAction:
    block_ids: Tuple[str, ...]
    delta: Vector2


@dataclass(frozen=True)
class DestroyBlocksAction:
    block_ids: Tuple[str, ...]


@dataclass(frozen=True)
class CodeGeneratedAction:
    root_block_id: str
    code: str


DragEvent = DragBeganEvent | DragMovedEvent | DragEndedEvent

DragAction = (
    BlockClonedAction
    | ReparentBlockAction
    | RaiseBlocksAction
    | SetDragPresentationAction
    | BlocksMovedAction
    | DestroyBlocksAction
    | CodeGeneratedAction
)


def make_moved_event(pointer: VectorLike) -> DragMovedEvent:
    return DragMovedEvent(pointer=Vector2.of(pointer))


def make_ended_event(pointer: VectorLike) -> DragEndedEvent:
    return DragEndedEvent(pointer=Vector2.of(pointer))


class BlockDragSession:
    """积木拖拽状态机（事件→状态→动作）。

    设计边界：
    - 积木图的变更（断开、平移、对接、删除）在这里直接完成；
    - 显示相关的副作用（换层、置顶、拖拽高亮、销毁图元、输出代码）
      以动作列表返回，由外层宿主（例如 Qt 桥接）落地；
    - 同一时刻只存在一个拖拽会话，不符合当前状态的事件一律忽略。

    状态流转：IDLE → DRAGGING → {PLACED, DELETED} → IDLE。
    PLACED / DELETED 只在处理结束事件期间短暂出现，结果记录在 `last_outcome`。
    """

    def __init__(self, workspace: Workspace, canvas_region: CanvasRegionTest) -> None:
        self._workspace = workspace
        self._canvas_region = canvas_region

        self._state: DragState = DragState.IDLE
        self._dragged_block_id: Optional[str] = None
        # 首次移动只记录基线，避免积木在起手时跳一下
        self._last_pointer: Optional[Vector2] = None
        # 拖起前所在程序树的根（若有），落块后也需要重新输出其代码
        self._former_root_id: Optional[str] = None
        self._last_outcome: Optional[DragState] = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def dragged_block_id(self) -> Optional[str]:
        return self._dragged_block_id

    @property
    def last_outcome(self) -> Optional[DragState]:
        return self._last_outcome

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    def set_canvas_region(self, canvas_region: CanvasRegionTest) -> None:
        self._canvas_region = canvas_region

    def handle_event(self, event: DragEvent) -> List[DragAction]:
        if isinstance(event, DragBeganEvent):
            if self._state != DragState.IDLE:
                self._log_ignored(event)
                return []
            return self._begin(event.block_id)

        if self._state != DragState.DRAGGING:
            self._log_ignored(event)
            return []

        if isinstance(event, DragMovedEvent):
            return self._move(event.pointer)

        if isinstance(event, DragEndedEvent):
            return self._end(event.pointer)

        return []

    # ===== 内部：各阶段处理 =====

    def _dragged_block(self) -> Optional[Block]:
        if self._dragged_block_id is None:
            return None
        return self._workspace.registry.get(self._dragged_block_id)

    def _begin(self, block_id: str) -> List[DragAction]:
        block = self._workspace.registry.get(block_id)
        if block is None:
            log_warn("[拖拽] 未找到积木 {}，忽略拖拽开始", block_id)
            return []

        actions: List[DragAction] = []

        if block.leave_clone:
            clone = block.clone()
            clone.leave_clone = True
            block.leave_clone = False
            if self._workspace.contains(block):
                self._workspace.place_subtree(clone)
            actions.append(BlockClonedAction(source_block_id=block.id, clone_block_id=clone.id))

        former_parent = block.parent_block()
        self._former_root_id = former_parent.root_block().id if former_parent is not None else None

        # 与上方积木断开（原父积木会收到一次 hierarchy_changed）
        block.detach()

        subtree_ids = self._subtree_ids(block)
        actions.append(ReparentBlockAction(block_id=block.id, layer=CanvasLayer.FLOATING))
        actions.append(RaiseBlocksAction(block_ids=subtree_ids))
        actions.append(SetDragPresentationAction(block_ids=subtree_ids, enabled=True))

        self._dragged_block_id = block.id
        self._last_pointer = None
        self._state = DragState.DRAGGING
        self._log_verbose("[拖拽] 开始拖拽 {}（子树 {} 个积木）", block.id, len(subtree_ids))
        return actions

    def _move(self, pointer: Vector2) -> List[DragAction]:
        block = self._dragged_block()
        if block is None:
            self._reset()
            return []

        if self._last_pointer is None:
            self._last_pointer = pointer
            return []

        delta = pointer - self._last_pointer
        self._last_pointer = pointer
        if delta == Vector2():
            return []

        block.apply_delta(delta)
        return [BlocksMovedAction(block_ids=self._subtree_ids(block), delta=delta)]

    def _end(self, pointer: Vector2) -> List[DragAction]:
        block = self._dragged_block()
        if block is None:
            self._reset()
            return []

        subtree_ids = self._subtree_ids(block)
        actions: List[DragAction] = []

        if not self._canvas_region(pointer):
            self._state = DragState.DELETED
            self._log_verbose("[拖拽] 落点 ({:.1f}, {:.1f}) 在画布外，删除子树 {}", pointer.x, pointer.y, block.id)
            self._workspace.delete_subtree(block)
            actions.append(DestroyBlocksAction(block_ids=subtree_ids))
            actions.extend(self._render_roots([self._former_root_id]))
            return self._finish(actions)

        self._state = DragState.PLACED
        actions.append(ReparentBlockAction(block_id=block.id, layer=CanvasLayer.CANVAS))
        actions.append(SetDragPresentationAction(block_ids=subtree_ids, enabled=False))
        self._last_pointer = None

        self._workspace.place_subtree(block)

        attached_to: Optional[str] = None
        for candidate in self._workspace.placed_blocks():
            snap = block.snap_in_some_connection(candidate)
            if snap is None:
                continue
            attached_to = candidate.id
            moved_block = self._workspace.registry.get(snap.moved_block_id)
            if moved_block is not None and snap.delta != Vector2():
                actions.append(BlocksMovedAction(block_ids=self._subtree_ids(moved_block), delta=snap.delta))
            break

        self._log_verbose("[拖拽] 落下 {}，对接目标={}", block.id, attached_to or "无")

        actions.extend(self._render_roots([block.root_block().id, self._former_root_id]))
        return self._finish(actions)

    def _render_roots(self, root_ids: List[Optional[str]]) -> List[DragAction]:
        actions: List[DragAction] = []
        seen: List[str] = []
        for root_id in root_ids:
            if root_id is None or root_id in seen:
                continue
            root = self._workspace.registry.get(root_id)
            if root is None:
                continue
            root = root.root_block()
            if root.id in seen:
                continue
            seen.append(root.id)
            code = root.get_code()
            if getattr(settings, "BLOCK_CODE_PRINT_ON_DROP", True):
                log_print("[代码] {}:\n{}", root.id, code)
            actions.append(CodeGeneratedAction(root_block_id=root.id, code=code))
        return actions

    def _finish(self, actions: List[DragAction]) -> List[DragAction]:
        self._last_outcome = self._state
        self._reset()
        return actions

    def _reset(self) -> None:
        self._state = DragState.IDLE
        self._dragged_block_id = None
        self._last_pointer = None
        self._former_root_id = None

    @staticmethod
    def _subtree_ids(block: Block) -> Tuple[str, ...]:
        return tuple(member.id for member in block.descending_blocks())

    def _log_ignored(self, event: DragEvent) -> None:
        self._log_verbose("[拖拽] 状态 {} 下忽略事件 {}", self._state.value, type(event).__name__)

    @staticmethod
    def _log_verbose(message: str, *args) -> None:
        if getattr(settings, "BLOCK_DRAG_VERBOSE", False):
            print(message.format(*args))
