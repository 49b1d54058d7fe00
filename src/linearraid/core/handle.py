#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
物理文件句柄

定义虚拟流依赖的物理文件能力 (seek / read_exact / write_exact / close)，
并提供基于内置 open() 的默认实现。上层模块只通过 FileHandle 接口访问文件，
不直接操作文件指针。
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Optional

from ..exceptions import StorageIOError


class FileHandle(ABC):
    """
    物理文件句柄接口
    
    可自行实现以接入非本地存储 (如块设备、内存缓冲)。
    所有方法失败时应抛出 OSError，虚拟流会将其包装为 StorageIOError。
    """
    
    @property
    @abstractmethod
    def path(self) -> str:
        """物理文件路径 (用于错误信息与日志)"""
        pass
    
    @abstractmethod
    def seek(self, position: int) -> None:
        """
        移动到指定绝对位置
        
        Args:
            position: 目标位置 (允许超过物理文件末尾)
        """
        pass
    
    @abstractmethod
    def read_exact(self, size: int) -> bytes:
        """
        读取最多 size 字节
        
        物理文件比请求短时返回实际存在的字节，不视为错误。
        
        Args:
            size: 要读取的字节数
            
        Returns:
            读取的字节 (长度可能小于 size)
        """
        pass
    
    @abstractmethod
    def write_exact(self, data: bytes) -> None:
        """
        完整写入 data
        
        写入位置超过物理文件末尾时，中间区域由文件系统以零字节填充。
        
        Args:
            data: 要写入的字节
        """
        pass
    
    @abstractmethod
    def close(self) -> None:
        """关闭句柄"""
        pass


class LocalFileHandle(FileHandle):
    """
    本地文件句柄
    
    封装内置 open() 返回的二进制文件对象。
    """
    
    def __init__(self, path: str, file: BinaryIO):
        """
        初始化句柄
        
        Args:
            path: 文件路径
            file: 以二进制模式打开的文件对象
        """
        self._path = path
        self._file = file
    
    @property
    def path(self) -> str:
        return self._path
    
    def seek(self, position: int) -> None:
        self._file.seek(position)
    
    def read_exact(self, size: int) -> bytes:
        # 普通文件上 read() 仅在文件末尾返回短数据，循环兼容管道等短读设备
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._file.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b''.join(chunks)
    
    def write_exact(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self._file.write(view)
            if written is None:
                raise BlockingIOError(f"写入 '{self._path}' 被阻塞")
            view = view[written:]
        self._file.flush()
    
    def close(self) -> None:
        self._file.close()
    
    @property
    def closed(self) -> bool:
        return self._file.closed


# 句柄打开函数类型: (path, mode) -> FileHandle
HandleOpener = Callable[[str, str], FileHandle]


def open_local(path: str, mode: str) -> FileHandle:
    """
    以指定模式打开本地文件
    
    Args:
        path: 文件路径
        mode: Python 二进制模式 (如 'rb', 'r+b')
        
    Returns:
        LocalFileHandle 实例
        
    Raises:
        OSError: 文件不存在或无权限
    """
    return LocalFileHandle(path, open(path, mode))


def wrap_os_error(path: str, operation: str, error: OSError) -> StorageIOError:
    """将底层 OSError 转换为 StorageIOError (已是 StorageIOError 则原样返回)"""
    if isinstance(error, StorageIOError):
        return error
    return StorageIOError(path, operation, error)


def close_quietly(handle: Optional[FileHandle]) -> Optional[OSError]:
    """
    关闭句柄并返回关闭时的错误 (不抛出)
    
    用于构造失败后的清理，以及 close() 时保证其余句柄仍被关闭。
    """
    if handle is None:
        return None
    try:
        handle.close()
    except OSError as e:
        return e
    return None
