"""
测试内置积木变体的代码生成

覆盖场景：
1. 空程序输出 pass 占位
2. 嵌套的循环/条件/表达式按缩进拼接
3. 数值与比较运算符的格式化
4. 缩进字符串来自全局设置
"""

from __future__ import annotations

import pytest

from engine.blocks import ActionBlock, BlockRegistry, CompareBlock, IfBlock, NumberBlock, RepeatBlock, StartBlock
from engine.blocks.code_blocks import indent_code
from engine.configs.settings import settings


def _plug(parent, socket_name: str, child) -> None:
    assert parent.socket(socket_name).attach(child, child.root_socket)


def _build_program(registry: BlockRegistry) -> StartBlock:
    start = StartBlock(registry)
    loop = RepeatBlock(registry)
    step = ActionBlock(registry, command="forward")
    branch = IfBlock(registry)
    compare = CompareBlock(registry, operator="<")

    _plug(start, "next", loop)
    _plug(loop, "count", NumberBlock(registry, value=3))
    _plug(loop, "body", step)
    _plug(loop, "next", branch)
    _plug(branch, "condition", compare)
    _plug(compare, "left", NumberBlock(registry, value=1))
    _plug(compare, "right", NumberBlock(registry, value=2))
    return start


def test_empty_program_renders_pass() -> None:
    registry = BlockRegistry()
    assert StartBlock(registry).get_code() == "def main():\n    pass\n"


def test_nested_program_is_indented_per_level() -> None:
    registry = BlockRegistry()
    start = _build_program(registry)

    assert start.get_code() == (
        "def main():\n"
        "    for _ in range(3):\n"
        "        forward()\n"
        "    if 1 < 2:\n"
        "        pass\n"
    )


def test_missing_expressions_fall_back_to_defaults() -> None:
    registry = BlockRegistry()

    assert RepeatBlock(registry).get_code() == "for _ in range(0):\n    pass\n"
    assert IfBlock(registry).get_code() == "if False:\n    pass\n"
    assert CompareBlock(registry, operator="==").get_code() == "0 == 0"


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, "3"),
        (3.0, "3"),
        (-2, "-2"),
        (2.5, "2.5"),
    ],
)
def test_number_formatting(value, expected: str) -> None:
    registry = BlockRegistry()
    assert NumberBlock(registry, value=value).get_code() == expected


def test_unknown_compare_operator_is_rejected() -> None:
    registry = BlockRegistry()
    with pytest.raises(ValueError):
        CompareBlock(registry, operator="=>")
    # 构造失败的积木不会进入注册表
    assert len(registry) == 0


def test_indent_follows_settings(monkeypatch) -> None:
    registry = BlockRegistry()
    start = _build_program(registry)

    monkeypatch.setattr(settings, "BLOCK_CODE_INDENT", "\t")

    assert start.get_code() == "def main():\n\tfor _ in range(3):\n\t\tforward()\n\tif 1 < 2:\n\t\tpass\n"


def test_indent_code_skips_blank_lines() -> None:
    assert indent_code("a\n\nb\n") == "    a\n\n    b\n"


def test_clone_keeps_variant_parameters() -> None:
    registry = BlockRegistry()

    assert NumberBlock(registry, value=7).clone().get_code() == "7"
    assert CompareBlock(registry, operator=">=").clone().get_code() == "0 >= 0"
    assert ActionBlock(registry, command="jump").clone().get_code() == "jump()\n"
