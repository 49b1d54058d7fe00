#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
虚拟流配置

集中管理 LinearStream 的可选参数，并支持从环境变量覆盖。
LinearStream 未传入 options 时使用 StreamOptions.from_env()。
"""

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .core.handle import HandleOpener, open_local
from .exceptions import ConfigurationError
from .separator import DEFAULT_SEARCH_CHUNK, Delimiter, SeparatorPolicy


# 环境变量名
SEARCH_CHUNK_ENV = 'LINEARRAID_SEARCH_CHUNK'


@dataclass(frozen=True)
class StreamOptions:
    """
    LinearStream 可选参数
    
    Attributes:
        field_separator: print() 连接各个值使用的分隔串
        separator: readline() 默认使用的分隔策略，None 表示按行 (见 resolved_separator)
        search_chunk_size: 分隔符搜索时每次向前读取的字节数
        opener: 物理文件打开函数 (path, mode) -> FileHandle
    """
    field_separator: bytes = b""
    separator: Optional[SeparatorPolicy] = None
    search_chunk_size: int = DEFAULT_SEARCH_CHUNK
    opener: HandleOpener = field(default=open_local)
    
    def __post_init__(self):
        if isinstance(self.field_separator, str):
            object.__setattr__(
                self, 'field_separator', self.field_separator.encode('utf-8')
            )
        if self.search_chunk_size <= 0:
            raise ConfigurationError(
                f"搜索块大小必须为正整数, 实际 {self.search_chunk_size!r}"
            )
    
    def resolved_separator(self) -> SeparatorPolicy:
        """
        readline() 实际使用的分隔策略
        
        未指定 separator 时按 search_chunk_size 构造换行分隔符，
        因此修改 search_chunk_size 后默认策略随之变化。
        """
        if self.separator is not None:
            return self.separator
        return Delimiter(b"\n", self.search_chunk_size)
    
    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides
    ) -> 'StreamOptions':
        """
        从环境变量构建配置
        
        显式传入的 overrides 优先于环境变量。
        
        Args:
            environ: 环境变量映射，默认 os.environ
            **overrides: 其余字段
            
        Raises:
            ConfigurationError: 环境变量值无效
        """
        environ = os.environ if environ is None else environ
        raw = environ.get(SEARCH_CHUNK_ENV)
        if raw and 'search_chunk_size' not in overrides:
            try:
                overrides['search_chunk_size'] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"环境变量 {SEARCH_CHUNK_ENV} 不是整数: {raw!r}"
                ) from None
        return cls(**overrides)
    
    def with_changes(self, **changes) -> 'StreamOptions':
        """返回修改部分字段后的新配置"""
        return replace(self, **changes)
