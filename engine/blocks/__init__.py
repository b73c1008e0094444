from __future__ import annotations

"""积木连接核心。

本子包承载"积木何时可以吸附、吸附如何修正位置、子树如何移动/拆卸/重挂、
结构变化如何向上传递"的纯引擎层逻辑，不依赖 Qt。

暴露的核心组件：
- Block / Socket / SocketKind / ConnectionKind / SocketSpec
- BlockRegistry / SocketRef（连接以ID对保存，经注册表解析）
- Workspace（已放置积木的有序集合）
- 内置积木变体：StartBlock / ActionBlock / RepeatBlock / IfBlock / NumberBlock / CompareBlock
"""

from . import attachment  # noqa: F401
from .attachment import SnapResult  # noqa: F401
from .geometry import RectRegion, Vector2  # noqa: F401
from .socket_types import ConnectionKind, SocketKind, SocketSpec, can_mate_sockets  # noqa: F401
from .block_registry import BlockRegistry, SocketRef  # noqa: F401
from .socket_model import Socket  # noqa: F401
from .block_model import Block  # noqa: F401
from .workspace import Workspace  # noqa: F401
from .code_blocks import (  # noqa: F401
    ActionBlock,
    CodeBlock,
    CompareBlock,
    IfBlock,
    NumberBlock,
    RepeatBlock,
    StartBlock,
)
