from __future__ import annotations

import ast
import tokenize
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SKIP_DIR_NAMES = {".git", ".venv", "venv", "__pycache__", "build", "dist"}


def _iter_python_source_files(root: Path) -> list[Path]:
    python_files: list[Path] = []
    for python_file_path in root.rglob("*.py"):
        if any(part in SKIP_DIR_NAMES for part in python_file_path.relative_to(PROJECT_ROOT).parts):
            continue
        python_files.append(python_file_path)
    return python_files


def _read_source(python_file_path: Path) -> str:
    with tokenize.open(python_file_path) as file_handle:
        return file_handle.read()


def test_all_python_files_are_syntax_compilable() -> None:
    """
    目标：确保仓库内所有 .py 文件都能被编译通过。

    说明：使用内置 compile 做纯语法检查，不执行代码，也不写入 .pyc。
    """
    for python_file_path in _iter_python_source_files(PROJECT_ROOT):
        compile(_read_source(python_file_path), str(python_file_path), "exec")


def test_engine_layer_does_not_import_qt() -> None:
    """
    分层约束：engine/ 是纯逻辑层，不允许直接依赖 PyQt6。

    Qt 相关的适配只放在 app/ui 下（例如积木拖拽桥接）。
    """
    offenders: list[str] = []
    for python_file_path in _iter_python_source_files(PROJECT_ROOT / "engine"):
        tree = ast.parse(_read_source(python_file_path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                module_names = [alias.name for alias in node.names]
            elif isinstance(node, ast.ImportFrom):
                module_names = [node.module or ""]
            else:
                continue
            if any(name.split(".")[0] == "PyQt6" for name in module_names):
                offenders.append(f"{python_file_path.relative_to(PROJECT_ROOT)}:{node.lineno}")

    assert offenders == [], "engine 层出现 PyQt6 导入：\n" + "\n".join(offenders)
