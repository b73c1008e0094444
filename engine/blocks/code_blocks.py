"""内置积木变体

每个变体声明自己的插槽布局，并把自身及子积木渲染成类 Python 的程序文本。
约定：
- 语句积木根插槽为 公/regular（挂到上一条语句的 `next` 或容器的 `body`），
  通过 `next` 母口串联下一条语句；
- 表达式积木根插槽为 公/number 或 公/logic，插入对应的母口。
"""

from __future__ import annotations

from typing import Any, Dict

from engine.blocks.block_model import Block
from engine.blocks.block_registry import BlockRegistry
from engine.blocks.geometry import VectorLike
from engine.blocks.socket_types import ConnectionKind, SocketKind, SocketSpec
from engine.configs.settings import settings
from engine.utils.logging.logger import log_info

MALE = SocketKind.MALE
FEMALE = SocketKind.FEMALE
REGULAR = ConnectionKind.REGULAR
LOGIC = ConnectionKind.LOGIC
NUMBER = ConnectionKind.NUMBER

COMPARE_OPERATORS = ("<", ">", "<=", ">=", "==", "!=")


def indent_code(text: str) -> str:
    indent = str(getattr(settings, "BLOCK_CODE_INDENT", "    "))
    return "".join(
        (indent + line) if line.strip() else line
        for line in text.splitlines(keepends=True)
    )


class CodeBlock(Block):
    """可生成代码的积木公共基类：记录结构刷新次数，并提供子积木代码的读取辅助。"""

    def __init__(self, registry: BlockRegistry, position: VectorLike = (0.0, 0.0), **kwargs: Any) -> None:
        # 结构变化后递增；宿主可据此判断是否需要重新取代码
        self.refresh_count = 0
        super().__init__(registry, position, **kwargs)

    def hierarchy_changed(self) -> None:
        self.refresh_count += 1
        log_info("[代码] {} 子树结构变化（第 {} 次刷新）", self.id, self.refresh_count)
        super().hierarchy_changed()

    def child_code(self, socket_name: str, default: str = "") -> str:
        child = self.child_block(socket_name)
        if child is None:
            return default
        return child.get_code()

    def body_code(self, socket_name: str = "body") -> str:
        body = self.child_code(socket_name)
        if not body:
            body = "pass\n"
        return indent_code(body)


class StartBlock(CodeBlock):
    """程序入口。根插槽为母口，任何积木的根插槽都无法挂上来（根-根被拒绝）。"""

    BLOCK_ID_PREFIX = "start"
    SOCKET_LAYOUT = (
        SocketSpec.make("top", FEMALE, REGULAR, (0.0, 0.0)),
        SocketSpec.make("next", FEMALE, REGULAR, (0.0, 40.0)),
    )

    def get_code(self) -> str:
        return "def main():\n" + self.body_code("next")


class ActionBlock(CodeBlock):
    BLOCK_ID_PREFIX = "action"
    SOCKET_LAYOUT = (
        SocketSpec.make("top", MALE, REGULAR, (0.0, 0.0)),
        SocketSpec.make("next", FEMALE, REGULAR, (0.0, 40.0)),
    )

    def __init__(
        self,
        registry: BlockRegistry,
        position: VectorLike = (0.0, 0.0),
        command: str = "wait",
        **kwargs: Any,
    ) -> None:
        self.command = str(command)
        super().__init__(registry, position, **kwargs)

    def copy_params(self) -> Dict[str, Any]:
        return {"command": self.command}

    def get_code(self) -> str:
        return f"{self.command}()\n" + self.child_code("next")


class RepeatBlock(CodeBlock):
    BLOCK_ID_PREFIX = "repeat"
    SOCKET_LAYOUT = (
        SocketSpec.make("top", MALE, REGULAR, (0.0, 0.0)),
        SocketSpec.make("count", FEMALE, NUMBER, (80.0, 10.0)),
        SocketSpec.make("body", FEMALE, REGULAR, (20.0, 40.0)),
        SocketSpec.make("next", FEMALE, REGULAR, (0.0, 100.0)),
    )

    def get_code(self) -> str:
        count = self.child_code("count", "0")
        return f"for _ in range({count}):\n" + self.body_code() + self.child_code("next")


class IfBlock(CodeBlock):
    BLOCK_ID_PREFIX = "if"
    SOCKET_LAYOUT = (
        SocketSpec.make("top", MALE, REGULAR, (0.0, 0.0)),
        SocketSpec.make("condition", FEMALE, LOGIC, (60.0, 10.0)),
        SocketSpec.make("body", FEMALE, REGULAR, (20.0, 40.0)),
        SocketSpec.make("next", FEMALE, REGULAR, (0.0, 100.0)),
    )

    def get_code(self) -> str:
        condition = self.child_code("condition", "False")
        return f"if {condition}:\n" + self.body_code() + self.child_code("next")


class NumberBlock(CodeBlock):
    BLOCK_ID_PREFIX = "number"
    SOCKET_LAYOUT = (SocketSpec.make("output", MALE, NUMBER, (0.0, 10.0)),)

    def __init__(
        self,
        registry: BlockRegistry,
        position: VectorLike = (0.0, 0.0),
        value: float = 0,
        **kwargs: Any,
    ) -> None:
        self.value = value
        super().__init__(registry, position, **kwargs)

    def copy_params(self) -> Dict[str, Any]:
        return {"value": self.value}

    def get_code(self) -> str:
        value = float(self.value)
        if value.is_integer():
            return str(int(value))
        return repr(value)


class CompareBlock(CodeBlock):
    BLOCK_ID_PREFIX = "compare"
    SOCKET_LAYOUT = (
        SocketSpec.make("output", MALE, LOGIC, (0.0, 10.0)),
        SocketSpec.make("left", FEMALE, NUMBER, (10.0, 10.0)),
        SocketSpec.make("right", FEMALE, NUMBER, (70.0, 10.0)),
    )

    def __init__(
        self,
        registry: BlockRegistry,
        position: VectorLike = (0.0, 0.0),
        operator: str = "<",
        **kwargs: Any,
    ) -> None:
        if operator not in COMPARE_OPERATORS:
            raise ValueError(f"不支持的比较运算符: {operator!r}")
        self.operator = operator
        super().__init__(registry, position, **kwargs)

    def copy_params(self) -> Dict[str, Any]:
        return {"operator": self.operator}

    def get_code(self) -> str:
        left = self.child_code("left", "0")
        right = self.child_code("right", "0")
        return f"{left} {self.operator} {right}"
