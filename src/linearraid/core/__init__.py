#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
LinearRaid 核心模块

提供物理文件句柄封装、物理文件表和虚拟地址空间映射。
"""

from .handle import FileHandle, LocalFileHandle, HandleOpener, open_local
from .table import PhysicalFileEntry, Span, FileTable

__all__ = [
    "FileHandle",
    "LocalFileHandle",
    "HandleOpener",
    "open_local",
    "PhysicalFileEntry",
    "Span",
    "FileTable",
]
