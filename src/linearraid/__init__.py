#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
LinearRaid - 把多个文件当作一个无缝大文件读写的零依赖 Python 库

类似线性 RAID 把多块硬盘拼接为一个设备，按声明大小顺序拼接物理文件，
提供单一游标的随机读写。
"""

import logging

__version__ = "0.1.0"

# 异常类
from .exceptions import (
    LinearRaidError,
    ConfigurationError,
    StorageIOError,
    BoundaryError,
)

# 物理文件
from .core import (
    FileHandle,
    LocalFileHandle,
    open_local,
    PhysicalFileEntry,
    FileTable,
)

# 分隔策略
from .separator import (
    SeparatorPolicy,
    Slurp,
    FixedLength,
    Delimiter,
    LINE,
    SLURP,
)

# 配置
from .config import StreamOptions
from .log import configure_logging

# 工具函数
from .utils import normalize_mode, parse_layout, layout_from_paths

# 虚拟流
from .stream import LinearStream

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # 版本
    "__version__",
    # 异常
    "LinearRaidError",
    "ConfigurationError",
    "StorageIOError",
    "BoundaryError",
    # 物理文件
    "FileHandle",
    "LocalFileHandle",
    "open_local",
    "PhysicalFileEntry",
    "FileTable",
    # 分隔策略
    "SeparatorPolicy",
    "Slurp",
    "FixedLength",
    "Delimiter",
    "LINE",
    "SLURP",
    # 配置
    "StreamOptions",
    "configure_logging",
    # 工具
    "normalize_mode",
    "parse_layout",
    "layout_from_paths",
    # 虚拟流
    "LinearStream",
]
