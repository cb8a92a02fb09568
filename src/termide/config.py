"""termide 配置

配置分为以下几类：
- 路径配置：用户配置目录、settings 文件
- 日志配置
- Workspace 配置：目录树深度、文件监听
- PTY 配置：默认尺寸、终端类型
- 命令行配置
"""

import os
from pathlib import Path

APP_NAME = "termide"

# === 路径配置 ===
_XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
CONFIG_DIR = Path(os.environ.get("TERMIDE_CONFIG_DIR", str(Path(_XDG_CONFIG_HOME) / APP_NAME)))
SETTINGS_FILE = CONFIG_DIR / "settings.json"

# === 日志配置 ===
LOG_LEVEL = os.environ.get("TERMIDE_LOG_LEVEL", "INFO")  # 日志级别
LOG_FORMAT = "[%(name)s] %(message)s"

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集

# === Workspace 配置 ===
DEFAULT_TREE_DEPTH = 3  # buildTree 默认递归深度
WATCH_POLL_INTERVAL = 0.5  # 文件监听轮询间隔（秒）
MAX_RECENT_WORKSPACES = 10  # recentWorkspaces 保留条数

# === PTY 配置 ===
DEFAULT_PTY_COLS = 80
DEFAULT_PTY_ROWS = 24
PTY_TERM = "xterm-256color"
PTY_READ_SIZE = 4096  # 单次读取字节数
DEFAULT_SHELL = os.environ.get("SHELL", "/bin/sh")

# === 编辑器配置 ===
COMMAND_LINE_SENTINEL = ":"  # 命令行前缀
UNTITLED_LABEL = "Untitled"
DEFAULT_TERMINAL_TITLE = "Terminal"
MAIN_PANE_ID = "main-pane"
