#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
记录分隔策略

决定 readline() 如何从虚拟流中切出一条记录:
- Slurp: 读取到 EOF 的全部剩余字节
- FixedLength(n): 定长记录
- Delimiter(token): 读取到 token (含) 为止

策略是显式传入的值对象，不存在全局可变的分隔符设置。
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .stream import LinearStream


DEFAULT_SEARCH_CHUNK = 1024


class SeparatorPolicy(ABC):
    """
    分隔策略基类
    
    子类实现 read_record()，只能通过虚拟流的公开读写接口访问数据。
    """
    
    @abstractmethod
    def read_record(self, stream: 'LinearStream') -> bytes:
        """
        从当前游标读取一条记录
        
        调用方保证游标不在 EOF。
        
        Args:
            stream: 虚拟流
            
        Returns:
            记录字节
        """
        pass


class Slurp(SeparatorPolicy):
    """一次读取全部剩余字节"""
    
    def read_record(self, stream: 'LinearStream') -> bytes:
        return stream.read(stream.total_length - stream.position)
    
    def __eq__(self, other) -> bool:
        return isinstance(other, Slurp)
    
    def __hash__(self) -> int:
        return hash(Slurp)
    
    def __repr__(self) -> str:
        return "Slurp()"


class FixedLength(SeparatorPolicy):
    """
    定长记录
    
    每次读取 size 字节；物理文件短于声明大小的部分为零字节，
    接近 EOF 时返回的记录可能短于 size。
    """
    
    def __init__(self, size: int):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ConfigurationError(f"定长记录大小必须为正整数, 实际 {size!r}")
        self.size = size
    
    def read_record(self, stream: 'LinearStream') -> bytes:
        return stream.read(self.size)
    
    def __eq__(self, other) -> bool:
        return isinstance(other, FixedLength) and other.size == self.size
    
    def __hash__(self) -> int:
        return hash((FixedLength, self.size))
    
    def __repr__(self) -> str:
        return f"FixedLength({self.size})"


class Delimiter(SeparatorPolicy):
    """
    分隔符记录
    
    按块读取直到 token 出现在累计缓冲区中 (可跨越物理文件边界)，
    截断到第一次出现的 token 之后，并把游标回退到截断点。
    到达 EOF 仍未找到时返回已累计的全部内容。
    """
    
    def __init__(
        self,
        token: Union[bytes, str] = b"\n",
        search_chunk_size: int = DEFAULT_SEARCH_CHUNK
    ):
        """
        Args:
            token: 分隔符 (str 按 UTF-8 编码)
            search_chunk_size: 每次向前读取的字节数
        """
        if isinstance(token, str):
            token = token.encode('utf-8')
        if not token:
            raise ConfigurationError("分隔符不能为空")
        if search_chunk_size <= 0:
            raise ConfigurationError(
                f"搜索块大小必须为正整数, 实际 {search_chunk_size!r}"
            )
        self.token = bytes(token)
        self.search_chunk_size = search_chunk_size
    
    def read_record(self, stream: 'LinearStream') -> bytes:
        start_position = stream.position
        token = self.token
        buffer = bytearray()
        search_from = 0
        
        found = -1
        while not stream.at_end():
            appended_at = len(buffer)
            count = stream.read_into(buffer, self.search_chunk_size, appended_at)
            # read_into 会把越过 EOF 的部分补零，这里只保留真实读取的长度
            del buffer[appended_at + count:]
            
            found = buffer.find(token, search_from)
            if found != -1:
                break
            # token 可能跨越两次读取，保留末尾 len(token) - 1 字节重新搜索
            search_from = max(0, len(buffer) - len(token) + 1)
        
        if found != -1:
            del buffer[found + len(token):]
            # 搜索时多读的部分不保留，游标由保留长度直接推出
            stream.seek(start_position + len(buffer))
        
        return bytes(buffer)
    
    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Delimiter)
            and other.token == self.token
            and other.search_chunk_size == self.search_chunk_size
        )
    
    def __hash__(self) -> int:
        return hash((Delimiter, self.token, self.search_chunk_size))
    
    def __repr__(self) -> str:
        if self.search_chunk_size != DEFAULT_SEARCH_CHUNK:
            return f"Delimiter({self.token!r}, search_chunk_size={self.search_chunk_size})"
        return f"Delimiter({self.token!r})"


# 常用策略实例
LINE = Delimiter(b"\n")
SLURP = Slurp()
