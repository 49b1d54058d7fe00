#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
物理文件表与虚拟地址空间

物理文件表是构造后不可变的 (路径, 声明大小, 句柄) 有序列表；
虚拟地址空间按声明大小的前缀和把全局偏移映射为 (段索引, 段内偏移)。
"""

import bisect
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from .handle import FileHandle


@dataclass(frozen=True)
class PhysicalFileEntry:
    """
    物理文件条目
    
    declared_size 决定寻址，与文件在磁盘上的实际大小无关。
    """
    path: str
    declared_size: int
    handle: FileHandle
    index: int = 0


@dataclass(frozen=True)
class Span:
    """
    一次跨段请求落在单个段内的部分
    
    Attributes:
        index: 段索引
        local_offset: 段内起始偏移
        size: 该段内处理的字节数
        global_offset: 对应的虚拟流起始偏移
    """
    index: int
    local_offset: int
    size: int
    global_offset: int


class FileTable:
    """
    物理文件表
    
    条目顺序在构造后不再改变，不支持增删。
    """
    
    def __init__(self, entries: Sequence[PhysicalFileEntry]):
        self._entries: Tuple[PhysicalFileEntry, ...] = tuple(entries)
        
        # 每段末尾的累计偏移 (单调不减，零大小段与前一段相同)
        self._ends: List[int] = []
        total = 0
        for entry in self._entries:
            total += entry.declared_size
            self._ends.append(total)
        self._total_length = total
    
    @property
    def entries(self) -> Tuple[PhysicalFileEntry, ...]:
        return self._entries
    
    @property
    def total_length(self) -> int:
        """虚拟流总长度 (所有声明大小之和)"""
        return self._total_length
    
    def __len__(self) -> int:
        return len(self._entries)
    
    def __iter__(self) -> Iterator[PhysicalFileEntry]:
        return iter(self._entries)
    
    def __getitem__(self, index: int) -> PhysicalFileEntry:
        return self._entries[index]
    
    def segment_start(self, index: int) -> int:
        """第 index 段在虚拟流中的起始偏移"""
        return self._ends[index] - self._entries[index].declared_size
    
    def locate(self, position: int) -> Tuple[int, int]:
        """
        将全局偏移映射为 (段索引, 段内偏移)
        
        零大小的段永远不会被选中。调用方必须先排除
        position >= total_length 的情况 (EOF 检查)。
        
        Args:
            position: 全局偏移, 0 <= position < total_length
            
        Returns:
            (段索引, 段内偏移) 元组，满足 0 <= 段内偏移 < 声明大小
            
        Raises:
            IndexError: position 越界
        """
        if position < 0 or position >= self._total_length:
            raise IndexError(
                f"位置 {position} 超出虚拟地址空间 [0, {self._total_length})"
            )
        
        # 第一个累计末尾 > position 的段，其大小必然非零
        index = bisect.bisect_right(self._ends, position)
        return index, position - self.segment_start(index)
    
    def iter_spans(self, position: int, length: int) -> Iterator[Span]:
        """
        把 [position, position + length) 拆分为逐段的 Span
        
        到达 total_length 时停止，不会对越界位置做查找；
        因此产出的 Span 大小之和可能小于 length。
        
        Args:
            position: 起始全局偏移
            length: 请求长度
            
        Yields:
            Span 对象
        """
        remaining = length
        while remaining > 0 and position < self._total_length:
            index, local = self.locate(position)
            size = min(remaining, self._entries[index].declared_size - local)
            yield Span(index, local, size, position)
            position += size
            remaining -= size
