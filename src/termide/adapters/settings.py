"""Settings 适配器

- Settings: pydantic 模型，JSON 键使用 camelCase（theme, fontSize, recentWorkspaces ...）
- JsonSettings: SettingsPort 实现，单个 JSON 文件持久化

加载规则：
- 文件内容合并到默认值之上，新增字段总有值
- 未知键保留（向前兼容）
- 已知键的值不合法时回退到该键的默认值
- 文件不存在/不可读/JSON 无效 → 全部默认值

写入规则：
- 原子写入（temp + rename）
- set() 立即落盘，写入成功后才替换内存缓存
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .. import config
from ..errors import SettingsError
from ..telemetry import get_logger, metrics
from .base import SettingsPort

logger = get_logger(__name__)


class LspServerConfig(BaseModel):
    """语言服务器启动配置"""

    command: str
    args: list[str] = Field(default_factory=list)


class KeybindingOverride(BaseModel):
    """用户快捷键

    Attributes:
        key: 组合键，如 "ctrl+shift+t"
        command: 命令 id
        when: 可选的焦点条件（FocusTarget 值）
    """

    key: str
    command: str
    when: str | None = None


def _default_lsp_servers() -> dict[str, LspServerConfig]:
    return {
        "typescript": LspServerConfig(command="typescript-language-server", args=["--stdio"]),
        "python": LspServerConfig(command="pylsp"),
        "go": LspServerConfig(command="gopls"),
    }


class Settings(BaseModel):
    """用户设置"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    theme: str = "tokyo-night"
    font_size: int = 14
    font_family: str = "monospace"
    tab_size: int = 2
    insert_spaces: bool = True
    word_wrap: Literal["none", "char", "word"] = "word"
    line_numbers: bool = True
    relative_line: bool = False
    cursor_style: Literal["block", "line", "underline"] = "block"
    cursor_blink: bool = True
    keybindings: list[KeybindingOverride] = Field(default_factory=list)
    recent_workspaces: list[str] = Field(default_factory=list)
    lsp_servers: dict[str, LspServerConfig] = Field(default_factory=_default_lsp_servers)

    def to_json_dict(self) -> dict[str, Any]:
        """JSON 文档（camelCase 键，包含未知键）"""
        return self.model_dump(by_alias=True, mode="json")


def _field_name(key: str) -> str | None:
    """camelCase 或 snake_case 键 → 字段名"""
    for name, info in Settings.model_fields.items():
        if key in (name, info.alias):
            return name
    return None


def merge_over_defaults(raw: dict[str, Any]) -> Settings:
    """把文件内容合并到默认值之上

    已知键的非法值逐个回退到默认值，未知键原样保留。

    Args:
        raw: 解析后的 JSON 对象

    Returns:
        Settings 实例
    """
    merged = Settings().to_json_dict()
    merged.update(raw)

    for _ in range(len(merged) + 1):
        try:
            return Settings.model_validate(merged)
        except ValidationError as e:
            invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
            defaults = Settings().to_json_dict()
            for key in invalid:
                logger.warning(f"[Settings] Invalid value for {key!r}, using default")
                metrics.inc("settings.error", {"op": "validate"})
                if key in defaults:
                    merged[key] = defaults[key]
                else:
                    merged.pop(key, None)
    return Settings()


def _write_atomic(path: Path, data: dict[str, Any]) -> None:
    """先写临时文件，再 rename"""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")
    fd, temp_path = tempfile.mkstemp(prefix="settings_", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.rename(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def _read_raw(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        logger.debug(f"[Settings] File not found: {path}")
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"[Settings] Unreadable settings file {path}: {e}")
        metrics.inc("settings.error", {"op": "load"})
        return None
    if not isinstance(data, dict):
        logger.warning(f"[Settings] Settings file is not a JSON object: {path}")
        metrics.inc("settings.error", {"op": "load"})
        return None
    return data


class JsonSettings(SettingsPort):
    """JSON 文件设置存储

    读穿透缓存：第一次 get/set 前未加载时先完整加载一次。

    Attributes:
        path: settings 文件路径
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else config.SETTINGS_FILE
        self._cache: Settings | None = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> Settings | None:
        return self._cache

    async def load(self) -> Settings:
        raw = await asyncio.to_thread(_read_raw, self.path)
        self._cache = merge_over_defaults(raw) if raw is not None else Settings()
        logger.debug(f"[Settings] Loaded from {self.path}")
        return self._cache

    async def save(self, settings: Settings) -> None:
        async with self._lock:
            await self._persist(settings)

    async def get(self, key: str) -> Any:
        settings = await self._ensure_loaded()
        name = _field_name(key)
        if name is not None:
            return getattr(settings, name)
        extra = settings.model_extra or {}
        if key in extra:
            return extra[key]
        raise SettingsError(f"Unknown settings key: {key}")

    async def set(self, key: str, value: Any) -> None:
        """更新单个键并立即落盘

        Raises:
            SettingsError: 未知键、值不合法或写入失败
        """
        async with self._lock:
            current = await self._ensure_loaded()
            name = _field_name(key)
            if name is None:
                raise SettingsError(f"Unknown settings key: {key}")

            data = current.to_json_dict()
            data[Settings.model_fields[name].alias or name] = value
            try:
                updated = Settings.model_validate(data)
            except ValidationError as e:
                metrics.inc("settings.error", {"op": "set"})
                raise SettingsError(f"Invalid value for {key!r}: {e}") from e

            await self._persist(updated)
            logger.info(f"[Settings] {key} updated")

    async def _ensure_loaded(self) -> Settings:
        if self._cache is None:
            return await self.load()
        return self._cache

    async def _persist(self, settings: Settings) -> None:
        try:
            await asyncio.to_thread(_write_atomic, self.path, settings.to_json_dict())
        except OSError as e:
            logger.error(f"[Settings] Save failed: {e}")
            metrics.inc("settings.error", {"op": "save"})
            raise SettingsError(f"Failed to write {self.path}: {e}") from e
        self._cache = settings
