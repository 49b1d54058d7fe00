#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供共享 fixtures 和内存句柄等测试工具。
"""

from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from linearraid import FileHandle, LinearStream


# ==================== 内存句柄 ====================

class MemoryHandle(FileHandle):
    """
    基于 bytearray 的句柄 (测试用)
    
    记录 close 次数，并可在指定操作上注入 OSError。
    """
    
    def __init__(self, store: 'MemoryStore', path: str):
        self._store = store
        self._path = path
        self._position = 0
        self.close_count = 0
    
    @property
    def path(self) -> str:
        return self._path
    
    @property
    def data(self) -> bytearray:
        return self._store.files[self._path]
    
    def _maybe_fail(self, operation: str) -> None:
        if (self._path, operation) in self._store.failures:
            raise OSError(5, f"模拟 {operation} 失败", self._path)
    
    def seek(self, position: int) -> None:
        self._maybe_fail('seek')
        self._position = position
    
    def read_exact(self, size: int) -> bytes:
        self._maybe_fail('read')
        chunk = bytes(self.data[self._position:self._position + size])
        self._position += len(chunk)
        return chunk
    
    def write_exact(self, data: bytes) -> None:
        self._maybe_fail('write')
        buf = self.data
        if len(buf) < self._position:
            buf.extend(bytes(self._position - len(buf)))
        buf[self._position:self._position + len(data)] = data
        self._position += len(data)
    
    def close(self) -> None:
        self.close_count += 1
        self._maybe_fail('close')


class MemoryStore:
    """
    内存文件系统 (测试用)
    
    opener 可直接作为 LinearStream 的 opener 参数。
    """
    
    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytearray] = {
            path: bytearray(content) for path, content in (files or {}).items()
        }
        self.handles: List[MemoryHandle] = []
        self.failures: Set[tuple] = set()
        self.missing: Set[str] = set()
    
    def opener(self, path: str, mode: str) -> MemoryHandle:
        if path in self.missing:
            raise FileNotFoundError(2, "No such file or directory", path)
        self.files.setdefault(path, bytearray())
        handle = MemoryHandle(self, path)
        self.handles.append(handle)
        return handle
    
    def fail(self, path: str, operation: str) -> None:
        self.failures.add((path, operation))


# ==================== 基础 Fixtures ====================

@pytest.fixture
def make_files(tmp_path):
    """
    在临时目录中创建物理文件
    
    Returns:
        函数 (内容字典) -> 路径字典
    """
    def _make(contents: Dict[str, bytes]) -> Dict[str, Path]:
        paths = {}
        for name, content in contents.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            paths[name] = path
        return paths
    return _make


@pytest.fixture
def ab_files(make_files) -> Dict[str, Path]:
    """两个声明大小为 5 的文件: AAAAA / BBBBB"""
    return make_files({"a.bin": b"AAAAA", "b.bin": b"BBBBB"})


@pytest.fixture
def ab_stream(ab_files):
    """以读写模式打开 ab_files 的虚拟流"""
    stream = LinearStream(
        'r+b',
        [(str(ab_files["a.bin"]), 5), (str(ab_files["b.bin"]), 5)]
    )
    yield stream
    stream.close()


@pytest.fixture
def memory_store() -> MemoryStore:
    """空的内存文件系统"""
    return MemoryStore()
