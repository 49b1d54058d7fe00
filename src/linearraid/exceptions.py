#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
LinearRaid 异常定义

所有异常均继承自 LinearRaidError，便于统一捕获。
"""

from typing import Optional


class LinearRaidError(Exception):
    """LinearRaid 基础异常"""
    pass


class ConfigurationError(LinearRaidError):
    """
    配置异常
    
    构造虚拟流时物理文件打开失败，或布局参数 (路径/声明大小/模式) 无效时抛出。
    抛出前已打开的句柄会全部关闭，不会暴露半成品对象。
    """
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path is not None:
            message = f"{message}: '{path}'"
        super().__init__(message)


class StorageIOError(LinearRaidError, OSError):
    """
    物理 I/O 异常
    
    物理文件的 seek/read/write/close 在设备层失败时抛出。
    同时是 OSError 子类，兼容常规的 except OSError 写法。
    """
    def __init__(self, path: str, operation: str, cause: Optional[BaseException] = None):
        self.path = path
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"物理文件 '{path}' {operation} 失败{detail}")


class BoundaryError(LinearRaidError, ValueError):
    """
    边界异常
    
    在 EOF 边界 (或越过边界) 写入，或 seek 到负位置时抛出。
    
    Attributes:
        position: 出错时的游标位置
        total_length: 虚拟流总长度
        written: 抛出前已提交到物理文件的字节数 (不回滚)
    """
    def __init__(
        self,
        position: int,
        total_length: int,
        written: int = 0,
        message: Optional[str] = None
    ):
        self.position = position
        self.total_length = total_length
        self.written = written
        super().__init__(
            message or
            f"位置 {position} 已到达虚拟流末尾 (总长度 {total_length})，"
            f"已写入 {written} 字节"
        )
