#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
线性虚拟流

把若干个声明了逻辑大小的物理文件按顺序拼接为一个可随机访问的字节流。
单个读写请求可以跨越任意多个物理文件边界，上层只需 seek + read/write。

典型用途: 固定宽度的数据块 (如 BitTorrent 分片) 与物理文件边界不对齐，
只知道块编号而不知道它跨越了哪些文件。
"""

import logging
import os
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .config import StreamOptions
from .core.handle import FileHandle, close_quietly, wrap_os_error
from .core.table import FileTable, PhysicalFileEntry, Span
from .exceptions import BoundaryError, ConfigurationError
from .separator import SeparatorPolicy
from .utils import is_writable_mode, normalize_mode, parse_layout


logger = logging.getLogger(__name__)

_WHENCE = (os.SEEK_SET, os.SEEK_CUR, os.SEEK_END)


class LinearStream:
    """
    线性虚拟流
    
    - 读取: 越过物理文件实际末尾 (但在声明大小内) 的部分返回零字节；
      越过虚拟流末尾的部分不读取，返回值为实际可用的字节数
    - 写入: 不能越过最后一个文件的声明大小，否则抛出 BoundaryError
    - 游标: 单一整数位置，允许 seek 到末尾之后，但不允许为负
    
    非线程安全，多线程共享时需由调用方加锁。
    
    Example:
        >>> with LinearStream.open('+<', [('data0', 100_000), ('data1', 50_000)]) as fh:
        ...     fh.seek(90_000)
        ...     chunk = fh.read(20_000)   # 跨越 data0/data1 边界
        ...     fh.seek(90_000)
        ...     fh.write(b'X' * 20_000)
    """
    
    def __init__(
        self,
        mode: str,
        layout: Union[dict, Sequence],
        options: Optional[StreamOptions] = None,
        **kwargs
    ):
        """
        打开所有物理文件并初始化虚拟流
        
        任意一个文件打开失败时，已打开的句柄会被全部关闭，然后抛出异常。
        
        Args:
            mode: 打开模式，统一应用于所有文件 ('rb', 'r+b', '<', '+<' 等)
            layout: 文件布局 [(路径, 声明大小), ...]，格式见 parse_layout()
            options: 可选参数，默认 StreamOptions.from_env()
            **kwargs: 覆盖 options 中的同名字段
            
        Raises:
            ConfigurationError: 模式/布局无效或文件打开失败
        """
        options = options or StreamOptions.from_env()
        if kwargs:
            options = options.with_changes(**kwargs)
        
        self._options = options
        self._mode = normalize_mode(mode)
        self._position = 0
        self._closed = False
        self._table = FileTable(self._open_all(parse_layout(layout)))
        
        logger.debug(
            "虚拟流已打开: %d 个文件, 总长度 %d, 模式 %s",
            len(self._table), self._table.total_length, self._mode
        )
    
    @classmethod
    def open(
        cls,
        mode: str,
        layout: Union[dict, Sequence],
        **kwargs
    ) -> 'LinearStream':
        """打开虚拟流 (构造函数的别名)"""
        return cls(mode, layout, **kwargs)
    
    def _open_all(self, layout: List[Tuple[str, int]]) -> List[PhysicalFileEntry]:
        """按顺序打开所有物理文件 (全部成功或全部回滚)"""
        entries: List[PhysicalFileEntry] = []
        
        for index, (path, size) in enumerate(layout):
            try:
                handle: FileHandle = self._options.opener(path, self._mode)
            except OSError as e:
                for entry in entries:
                    error = close_quietly(entry.handle)
                    if error is not None:
                        logger.warning("回滚时关闭 '%s' 失败: %s", entry.path, error)
                raise ConfigurationError(f"无法打开文件 ({e})", path) from e
            
            logger.debug("打开物理文件 #%d '%s' (声明大小 %d)", index, path, size)
            entries.append(PhysicalFileEntry(path, size, handle, index))
        
        return entries
    
    # ==================== 属性 ====================
    
    @property
    def total_length(self) -> int:
        """虚拟流总长度 (声明大小之和，构造后不变)"""
        return self._table.total_length
    
    @property
    def position(self) -> int:
        """当前游标位置"""
        return self._position
    
    @property
    def entries(self) -> Tuple[PhysicalFileEntry, ...]:
        """物理文件条目 (只读)"""
        return self._table.entries
    
    @property
    def mode(self) -> str:
        return self._mode
    
    @property
    def closed(self) -> bool:
        return self._closed
    
    @property
    def options(self) -> StreamOptions:
        return self._options
    
    @property
    def separator(self) -> SeparatorPolicy:
        """readline() 默认使用的分隔策略"""
        return self._options.resolved_separator()
    
    @property
    def field_separator(self) -> bytes:
        """print() 使用的字段连接串"""
        return self._options.field_separator
    
    def readable(self) -> bool:
        return True
    
    def writable(self) -> bool:
        return is_writable_mode(self._mode)
    
    def seekable(self) -> bool:
        return True
    
    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed stream")
    
    # ==================== 游标 ====================
    
    def tell(self) -> int:
        """返回当前游标位置"""
        self._check_open()
        return self._position
    
    def eof(self) -> bool:
        """游标是否恰好位于虚拟流末尾"""
        self._check_open()
        return self._position == self._table.total_length
    
    def at_end(self) -> bool:
        """游标是否位于末尾或之后 (此时读取恒为空，写入恒失败)"""
        self._check_open()
        return self._position >= self._table.total_length
    
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """
        移动游标
        
        允许越过末尾，不允许为负。
        
        Args:
            offset: 偏移量
            whence: 0 = 绝对位置, 1 = 相对当前位置, 2 = 相对末尾
            
        Returns:
            新的游标位置
            
        Raises:
            BoundaryError: 结果位置为负 (游标保持不变)
            ValueError: whence 无效
        """
        self._check_open()
        if whence not in _WHENCE:
            raise ValueError(f"无效的 whence: {whence!r}")
        
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._position + offset
        else:
            target = self._table.total_length + offset
        
        if target < 0:
            raise BoundaryError(
                self._position, self._table.total_length,
                message=f"无法 seek 到负位置 {target}"
            )
        
        self._position = target
        return target
    
    # ==================== 读取 ====================
    
    def _read_span(self, span: Span) -> bytes:
        entry = self._table[span.index]
        operation = 'seek'
        try:
            entry.handle.seek(span.local_offset)
            operation = 'read'
            data = entry.handle.read_exact(span.size)
        except OSError as e:
            raise wrap_os_error(entry.path, operation, e) from e
        
        if len(data) < span.size:
            logger.debug(
                "'%s' 实际内容不足, 偏移 %d 起补零 %d 字节",
                entry.path, span.local_offset + len(data), span.size - len(data)
            )
        return data
    
    def read_into(self, buffer: bytearray, length: int, offset: int = 0) -> int:
        """
        从游标处读取 length 字节写入 buffer[offset:]
        
        buffer 在 offset 处被截断后再追加数据 (offset 超过当前长度时先补零)。
        请求越过虚拟流末尾时，只读取到末尾为止，剩余部分以零字节补足，
        因此 buffer 的新增长度总是 length (EOF 时除外)。
        
        Args:
            buffer: 输出缓冲区
            length: 请求字节数
            offset: 在 buffer 中的写入位置
            
        Returns:
            实际从虚拟流消耗的字节数 (游标前进量)；已在 EOF 时返回 0
            
        Raises:
            StorageIOError: 物理读取失败 (已完成的段不回退)
        """
        self._check_open()
        if not isinstance(buffer, bytearray):
            raise TypeError("buffer 必须为 bytearray")
        if length < 0 or offset < 0:
            raise ValueError(f"length/offset 不能为负: {length}, {offset}")
        
        if len(buffer) < offset:
            buffer.extend(bytes(offset - len(buffer)))
        del buffer[offset:]
        
        if self.at_end():
            return 0
        
        consumed = 0
        for span in self._table.iter_spans(self._position, length):
            data = self._read_span(span)
            buffer += data
            if len(data) < span.size:
                buffer += bytes(span.size - len(data))
            # 按声明长度前进，而不是物理读到的长度
            self._position += span.size
            consumed += span.size
        
        if consumed < length:
            buffer += bytes(length - consumed)
        return consumed
    
    def read(self, size: Optional[int] = -1) -> bytes:
        """
        读取最多 size 字节
        
        Args:
            size: 字节数，None 或负数表示读取到末尾
            
        Returns:
            读取的字节，长度为 min(size, total_length - position)
        """
        self._check_open()
        if size is None or size < 0:
            size = max(0, self._table.total_length - self._position)
        
        buffer = bytearray()
        count = self.read_into(buffer, size)
        del buffer[count:]
        return bytes(buffer)
    
    def getc(self) -> bytes:
        """读取单个字节，EOF 时返回 b''"""
        return self.read(1)
    
    def readline(self, policy: Optional[SeparatorPolicy] = None) -> bytes:
        """
        按分隔策略读取一条记录
        
        Args:
            policy: 分隔策略，默认使用 self.separator
            
        Returns:
            记录字节，EOF 时返回 b''
        """
        self._check_open()
        if self.at_end():
            return b""
        policy = policy if policy is not None else self.separator
        return policy.read_record(self)
    
    def readlines(self, policy: Optional[SeparatorPolicy] = None) -> List[bytes]:
        """读取剩余的全部记录"""
        return list(self.iter_records(policy))
    
    def iter_records(self, policy: Optional[SeparatorPolicy] = None) -> Iterator[bytes]:
        """逐条产出记录直到 EOF"""
        while True:
            record = self.readline(policy)
            if not record:
                return
            yield record
    
    def __iter__(self) -> Iterator[bytes]:
        return self.iter_records()
    
    # ==================== 写入 ====================
    
    def _write_span(self, span: Span, data: memoryview) -> None:
        entry = self._table[span.index]
        operation = 'seek'
        try:
            entry.handle.seek(span.local_offset)
            operation = 'write'
            entry.handle.write_exact(bytes(data))
        except OSError as e:
            raise wrap_os_error(entry.path, operation, e) from e
        
        logger.debug(
            "写入 '%s' 偏移 %d, %d 字节", entry.path, span.local_offset, span.size
        )
    
    def write(self, data, length: Optional[int] = None, offset: int = 0) -> int:
        """
        从游标处写入 data[offset:offset + length]
        
        零长度写入在任何位置都直接成功。
        
        Args:
            data: bytes-like 数据
            length: 写入字节数，默认到 data 末尾
            offset: 在 data 中的起始位置
            
        Returns:
            写入的字节数
            
        Raises:
            BoundaryError: 游标已在末尾，或剩余容量不足
                (不足时已写入的段不会回滚，written 属性给出已写入字节数)
            StorageIOError: 物理写入失败 (已完成的段不回滚)
        """
        self._check_open()
        view = memoryview(data).cast('B')
        if length is None:
            length = len(view) - offset
        if length < 0 or offset < 0 or offset + length > len(view):
            raise ValueError(
                f"写入范围越界: offset={offset}, length={length}, 数据长度 {len(view)}"
            )
        
        if length == 0:
            return 0
        
        total = self._table.total_length
        if self.at_end():
            raise BoundaryError(self._position, total)
        
        written = 0
        for span in self._table.iter_spans(self._position, length):
            start = offset + written
            self._write_span(span, view[start:start + span.size])
            self._position += span.size
            written += span.size
        
        if written < length:
            raise BoundaryError(
                self._position, total, written,
                message=(
                    f"写入越过虚拟流末尾 (总长度 {total}): "
                    f"请求 {length} 字节, 仅写入 {written} 字节"
                )
            )
        return written
    
    @staticmethod
    def _to_bytes(value) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if not isinstance(value, str):
            value = str(value)
        return value.encode('utf-8')
    
    def print(self, *values) -> int:
        """
        以 field_separator 连接各个值后一次性写入
        
        str 按 UTF-8 编码，其他对象先 str()。
        
        Returns:
            写入的字节数
        """
        data = self._options.field_separator.join(self._to_bytes(v) for v in values)
        return self.write(data)
    
    def printf(self, fmt: Union[str, bytes], *args) -> int:
        """格式化 (% 语法) 后写入"""
        return self.print(fmt % args)
    
    # ==================== 定位读写 ====================
    
    def read_at(self, position: int, size: int) -> bytes:
        """seek 到 position 后读取 size 字节"""
        self.seek(position)
        return self.read(size)
    
    def write_at(self, position: int, data) -> int:
        """seek 到 position 后写入 data"""
        self.seek(position)
        return self.write(data)
    
    def read_record(self, index: int, record_size: int) -> bytes:
        """
        读取第 index 个定宽记录 (如协议分片)
        
        最后一个记录可能短于 record_size。
        """
        if record_size <= 0 or index < 0:
            raise ValueError(f"无效的记录参数: index={index}, size={record_size}")
        return self.read_at(index * record_size, record_size)
    
    def write_record(self, index: int, data, record_size: Optional[int] = None) -> int:
        """
        写入第 index 个定宽记录
        
        Args:
            index: 记录编号
            data: 记录内容
            record_size: 记录宽度，默认 len(data)
        """
        record_size = len(data) if record_size is None else record_size
        if record_size <= 0 or index < 0:
            raise ValueError(f"无效的记录参数: index={index}, size={record_size}")
        return self.write_at(index * record_size, data)
    
    # ==================== 关闭 ====================
    
    def close(self) -> None:
        """
        按顺序关闭所有物理文件
        
        每个句柄只关闭一次；某个句柄关闭失败时仍会继续关闭其余句柄，
        最后抛出第一个错误。
        
        Raises:
            StorageIOError: 某个句柄关闭失败
        """
        if self._closed:
            return
        self._closed = True
        
        first_error = None
        for entry in self._table:
            error = close_quietly(entry.handle)
            if error is not None:
                logger.warning("关闭 '%s' 失败: %s", entry.path, error)
                if first_error is None:
                    first_error = (entry.path, error)
            else:
                logger.debug("关闭物理文件 #%d '%s'", entry.index, entry.path)
        
        if first_error is not None:
            path, error = first_error
            raise wrap_os_error(path, 'close', error) from error
    
    def __enter__(self) -> 'LinearStream':
        return self
    
    def __exit__(self, *args) -> None:
        self.close()
    
    def __repr__(self) -> str:
        state = 'closed' if self._closed else f'position={self._position}'
        return (
            f"<LinearStream files={len(self._table)} "
            f"total_length={self._table.total_length} {state}>"
        )
