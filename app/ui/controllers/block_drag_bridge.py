from __future__ import annotations

from typing import Optional, Set

from PyQt6 import QtCore

from app.ui.controllers.block_drag_state_machine import (
    BlockClonedAction,
    BlockDragSession,
    BlocksMovedAction,
    CodeGeneratedAction,
    DestroyBlocksAction,
    DragBeganEvent,
    DragState,
    RaiseBlocksAction,
    ReparentBlockAction,
    SetDragPresentationAction,
    make_ended_event,
    make_moved_event,
)
from engine.blocks.block_model import Block
from engine.blocks.geometry import Vector2
from engine.blocks.socket_model import Socket
from engine.blocks.workspace import Workspace
from engine.configs.settings import settings


class BlockDragBridge(QtCore.QObject):
    """Qt 桥接：把指针拖拽事件交给积木拖拽状态机，并把动作转成信号。

    - 有效落块区域用场景坐标下的 QRectF 表示；
    - 图元层（换层/置顶/高亮/销毁/重绘连接线）只需连接这里的信号。
    """

    block_cloned = QtCore.pyqtSignal(str, str)  # source_block_id, clone_block_id
    block_reparented = QtCore.pyqtSignal(str, str)  # block_id, layer
    blocks_raised = QtCore.pyqtSignal(list)  # block_ids
    drag_presentation_changed = QtCore.pyqtSignal(list, bool)  # block_ids, enabled
    blocks_moved = QtCore.pyqtSignal(list, float, float)  # block_ids, dx, dy
    blocks_destroyed = QtCore.pyqtSignal(list)  # block_ids
    code_generated = QtCore.pyqtSignal(str, str)  # root_block_id, code
    socket_attachment_changed = QtCore.pyqtSignal(str, int, bool)  # block_id, socket_index, attached

    def __init__(
        self,
        workspace: Workspace,
        canvas_rect: QtCore.QRectF,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._canvas_rect = QtCore.QRectF(canvas_rect)
        self._session = BlockDragSession(workspace, self._canvas_contains)
        self._watched_block_ids: Set[str] = set()

    @property
    def session(self) -> BlockDragSession:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session.state == DragState.DRAGGING

    def set_canvas_rect(self, canvas_rect: QtCore.QRectF) -> None:
        self._canvas_rect = QtCore.QRectF(canvas_rect)

    def _canvas_contains(self, point: Vector2) -> bool:
        return self._canvas_rect.contains(QtCore.QPointF(point.x, point.y))

    # ===== 插槽连接通知 =====

    def watch_block(self, block: Block) -> None:
        """订阅积木全部插槽的连接变化，转发为 socket_attachment_changed。"""
        if block.id in self._watched_block_ids:
            return
        self._watched_block_ids.add(block.id)
        for socket in block.sockets:
            socket.subscribe(self._on_socket_attachment_changed)

    def watch_subtree(self, block: Block) -> None:
        for member in block.descending_blocks():
            self.watch_block(member)

    def _on_socket_attachment_changed(self, socket: Socket) -> None:
        self.socket_attachment_changed.emit(socket.owner_id, socket.index, socket.is_attached())

    # ===== 指针事件入口 =====

    def begin_drag(self, block_id: str) -> None:
        self._handle_event(DragBeganEvent(block_id=block_id))

    def move_drag(self, scene_pos: QtCore.QPointF) -> None:
        self._handle_event(make_moved_event((scene_pos.x(), scene_pos.y())))

    def end_drag(self, scene_pos: QtCore.QPointF) -> None:
        self._handle_event(make_ended_event((scene_pos.x(), scene_pos.y())))

    # ===== 内部：状态机动作处理 =====

    def _handle_event(self, event) -> None:
        actions = self._session.handle_event(event)
        self._handle_actions(actions)

    def _handle_actions(self, actions) -> None:
        for action in actions:
            if isinstance(action, BlockClonedAction):
                if action.source_block_id in self._watched_block_ids:
                    clone = self._session.workspace.registry.get(action.clone_block_id)
                    if clone is not None:
                        self.watch_block(clone)
                self.block_cloned.emit(action.source_block_id, action.clone_block_id)
            elif isinstance(action, ReparentBlockAction):
                self.block_reparented.emit(action.block_id, action.layer.value)
            elif isinstance(action, RaiseBlocksAction):
                self.blocks_raised.emit(list(action.block_ids))
            elif isinstance(action, SetDragPresentationAction):
                self.drag_presentation_changed.emit(list(action.block_ids), bool(action.enabled))
            elif isinstance(action, BlocksMovedAction):
                self.blocks_moved.emit(list(action.block_ids), float(action.delta.x), float(action.delta.y))
            elif isinstance(action, DestroyBlocksAction):
                self._watched_block_ids.difference_update(action.block_ids)
                self.blocks_destroyed.emit(list(action.block_ids))
            elif isinstance(action, CodeGeneratedAction):
                self.code_generated.emit(action.root_block_id, action.code)
            elif getattr(settings, "BLOCK_DRAG_VERBOSE", False):
                print(f"[拖拽] 未处理的动作: {action!r}")
