"""积木编辑器全局设置

集中保存吸附半径、代码缩进与调试开关。设置项就是 `Settings` 的大写类属性，
读取时直接访问 `settings.XXX`；用户覆盖值保存在工作区下的 JSON 文件中。

示例：
    from engine.configs.settings import settings

    settings.set_config_path(workspace_root)
    settings.load()
    radius = settings.BLOCK_SNAP_RADIUS
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from engine.utils.logging.logger import log_info, log_warn

DEFAULT_USER_SETTINGS_RELATIVE_PATH = Path("app/runtime/cache/user_settings.json")


class Settings:
    """全局设置

    类属性即默认值；`load()` 只在实例上写入覆盖值，`reset_to_defaults()` 同时还原两者。
    """

    # ========== 吸附 ==========

    # 两个插槽可吸附的最大画布距离（严格小于该值才吸附）
    BLOCK_SNAP_RADIUS: float = 20.0

    # ========== 代码生成 ==========

    # 每级缩进使用的字符串
    BLOCK_CODE_INDENT: str = "    "

    # 落块后是否在控制台打印所在程序树的代码
    BLOCK_CODE_PRINT_ON_DROP: bool = True

    # ========== 调试 ==========

    # 控制 `log_info` 是否输出；warn/error 不受影响
    BLOCK_LOG_VERBOSE: bool = False

    # 吸附判定细节（候选插槽、位置修正、连接/断开）
    BLOCK_ATTACH_VERBOSE: bool = False

    # 拖拽状态机细节（开始/落下、被忽略的事件）
    BLOCK_DRAG_VERBOSE: bool = False

    # 用户设置文件（由 set_config_path 注入）
    _config_file: Optional[Path] = None

    def __repr__(self) -> str:
        return f"Settings({self._get_all_settings()})"

    @classmethod
    def set_config_path(cls, workspace_path: Path):
        """根据工作区根目录确定用户设置文件位置。"""
        cls._config_file = Path(workspace_path) / DEFAULT_USER_SETTINGS_RELATIVE_PATH
        log_info("[Settings] 用户设置文件: {}", cls._config_file)

    @classmethod
    def _setting_keys(cls) -> list:
        return [key for key in dir(cls) if key.isupper() and not key.startswith('_')]

    def _get_all_settings(self) -> Dict[str, Any]:
        # 从实例读取，实例上的覆盖值优先
        return {key: getattr(self, key) for key in self._setting_keys()}

    def save(self) -> bool:
        """把当前设置写入用户设置文件。未设置路径时返回 False。"""
        config_file = self.__class__._config_file
        if config_file is None:
            log_warn("[Settings] 未设置配置文件路径，跳过保存")
            return False

        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as file:
            json.dump(self._get_all_settings(), file, indent=2, ensure_ascii=False, sort_keys=True)
        log_info("[Settings] 已保存到 {}", config_file)
        return True

    def load(self) -> bool:
        """读取用户设置文件并覆盖同名设置项。

        - 文件不存在或未设置路径：返回 False，保持默认值；
        - 未知键、类型与默认值不符的键：警告后跳过。
        """
        config_file = self.__class__._config_file
        if config_file is None or not config_file.exists():
            log_info("[Settings] 无用户设置文件（{}），使用默认值", config_file)
            return False

        with open(config_file, 'r', encoding='utf-8') as file:
            stored = json.load(file)

        known_keys = set(self._setting_keys())
        applied = 0
        for key, value in stored.items():
            if key not in known_keys:
                log_warn("[Settings] 忽略未知设置项 {}", key)
                continue
            coerced = _coerce_setting(getattr(self.__class__, key), value)
            if coerced is None:
                log_warn("[Settings] 设置项 {} 的值 {!r} 类型不符，已忽略", key, value)
                continue
            setattr(self, key, coerced)
            applied += 1

        log_info("[Settings] 从 {} 应用了 {} 个设置项", config_file, applied)
        return True

    @classmethod
    def reset_to_defaults(cls):
        """还原类属性默认值，并清除全局实例上由 `load()` 或直接赋值留下的覆盖值。"""
        for key, value in _DEFAULT_VALUES.items():
            setattr(cls, key, value)
            settings.__dict__.pop(key, None)
        log_info("[Settings] 已恢复默认设置")

    @classmethod
    def enable_debug_mode(cls):
        """打开全部详细日志。"""
        cls.BLOCK_LOG_VERBOSE = True
        cls.BLOCK_ATTACH_VERBOSE = True
        cls.BLOCK_DRAG_VERBOSE = True
        log_info("[Settings] 调试模式已开启")

    @classmethod
    def disable_debug_mode(cls):
        cls.BLOCK_LOG_VERBOSE = False
        cls.BLOCK_ATTACH_VERBOSE = False
        cls.BLOCK_DRAG_VERBOSE = False


def _coerce_setting(default: Any, value: Any) -> Any:
    """按默认值的类型校验用户值；不兼容时返回 None。"""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)
    if isinstance(default, str):
        return value if isinstance(value, str) else None
    return value


_DEFAULT_VALUES: Dict[str, Any] = {key: getattr(Settings, key) for key in Settings._setting_keys()}

# 全局设置实例
settings = Settings()
