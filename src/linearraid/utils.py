#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
LinearRaid 工具函数

提供打开模式规范化、文件布局解析等通用功能。
"""

import os
from typing import Iterable, List, Mapping, Sequence, Tuple, Union

from .exceptions import ConfigurationError


# 布局条目: (路径, 声明大小)
LayoutEntry = Tuple[str, int]

# 重定向风格的模式写法 → Python 二进制模式
REDIRECT_MODES = {
    '<': 'rb',
    '+<': 'r+b',
    '>': 'wb',
    '+>': 'w+b',
}

# 追加模式下 seek 对写入无效，无法做定位写
_APPEND_MODES = ('>>', '+>>')


def normalize_mode(mode: str) -> str:
    """
    打开模式规范化
    
    1. 重定向写法 ('<', '+<', '>', '+>') 转为 Python 模式
    2. 文本模式统一转为二进制模式
    3. 拒绝追加模式 (定位写会被追加到文件末尾)
    
    Args:
        mode: 原始模式
        
    Returns:
        Python 二进制模式字符串
        
    Raises:
        ConfigurationError: 模式无效
        
    Examples:
        >>> normalize_mode('+<')
        'r+b'
        >>> normalize_mode('r')
        'rb'
        >>> normalize_mode('w+')
        'w+b'
    """
    stripped = mode.strip()
    if stripped in _APPEND_MODES:
        raise ConfigurationError(f"不支持追加模式 {mode!r}")
    if stripped in REDIRECT_MODES:
        return REDIRECT_MODES[stripped]
    
    if 'a' in stripped:
        raise ConfigurationError(f"不支持追加模式 {mode!r}")
    if not stripped or set(stripped) - set('rwx+bt') or len(set(stripped)) != len(stripped):
        raise ConfigurationError(f"无效的打开模式 {mode!r}")
    # 标志位可以出现在任意位置 (如 'br', 'b+r')，但 r/w/x 必须恰好一个
    bases = [c for c in stripped if c in 'rwx']
    if len(bases) != 1 or ('b' in stripped and 't' in stripped):
        raise ConfigurationError(f"无效的打开模式 {mode!r}")
    
    base = bases[0]
    plus = '+' if '+' in stripped else ''
    return f"{base}{plus}b"


def is_writable_mode(mode: str) -> bool:
    """规范化后的模式是否允许写入"""
    return '+' in mode or mode[0] in 'wx'


def _check_size(path: str, size) -> int:
    if isinstance(size, bool) or not isinstance(size, int):
        raise ConfigurationError(f"声明大小必须为整数, 实际 {size!r}", path)
    if size < 0:
        raise ConfigurationError(f"声明大小不能为负数 ({size})", path)
    return size


def parse_layout(
    layout: Union[Mapping[str, int], Sequence]
) -> List[LayoutEntry]:
    """
    解析文件布局
    
    支持三种写法:
    - 映射: {"a.bin": 100, "b.bin": 50} (按插入顺序)
    - 二元组序列: [("a.bin", 100), ("b.bin", 50)]
    - 交替序列: ["a.bin", 100, "b.bin", 50]
    
    Args:
        layout: 布局描述
        
    Returns:
        [(路径, 声明大小), ...] 列表
        
    Raises:
        ConfigurationError: 布局格式无效或大小非法
    """
    if isinstance(layout, Mapping):
        pairs = list(layout.items())
    else:
        items = list(layout)
        if all(isinstance(item, (tuple, list)) for item in items):
            pairs = []
            for item in items:
                if len(item) != 2:
                    raise ConfigurationError(f"布局条目必须为 (路径, 大小): {item!r}")
                pairs.append((item[0], item[1]))
        else:
            if len(items) % 2 != 0:
                raise ConfigurationError("交替布局的元素个数必须为偶数")
            pairs = list(zip(items[0::2], items[1::2]))
    
    result = []
    for path, size in pairs:
        try:
            path = os.fspath(path)
        except TypeError:
            raise ConfigurationError(f"无效的文件路径 {path!r}") from None
        result.append((path, _check_size(path, size)))
    return result


def layout_from_paths(paths: Iterable[Union[str, os.PathLike]]) -> List[LayoutEntry]:
    """
    以磁盘上的实际大小作为声明大小生成布局
    
    Args:
        paths: 文件路径列表
        
    Returns:
        [(路径, 实际大小), ...] 列表
        
    Raises:
        ConfigurationError: 文件不存在或无法访问
    """
    result = []
    for path in paths:
        path = os.fspath(path)
        try:
            size = os.path.getsize(path)
        except OSError as e:
            raise ConfigurationError(f"无法获取文件大小 ({e})", path) from e
        result.append((path, size))
    return result
