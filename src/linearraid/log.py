#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
日志配置

库内部只通过 logging.getLogger(__name__) 记录日志，不主动配置处理器；
应用可调用 configure_logging() 快速启用输出。
"""

import logging
import os
from typing import Optional, Union


LOG_LEVEL_ENV = 'LINEARRAID_LOG_LEVEL'
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

_LEVEL_NAMES = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
    'NOTSET': logging.NOTSET,
}


def resolve_level(level: Optional[Union[int, str]] = None) -> int:
    """
    解析日志级别
    
    优先级: 显式参数 > 环境变量 LINEARRAID_LOG_LEVEL > WARNING
    
    Raises:
        ValueError: 未知的级别名称
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or 'WARNING'
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in _LEVEL_NAMES:
        raise ValueError(f"未知的日志级别: {level!r}")
    return _LEVEL_NAMES[name]


def configure_logging(
    level: Optional[Union[int, str]] = None,
    handler: Optional[logging.Handler] = None
) -> logging.Logger:
    """
    为 linearraid 日志器安装处理器
    
    重复调用不会叠加处理器。
    
    Args:
        level: 日志级别 (名称或数值)
        handler: 自定义处理器，默认输出到 stderr
        
    Returns:
        linearraid 根日志器
    """
    logger = logging.getLogger('linearraid')
    logger.setLevel(resolve_level(level))
    
    for existing in list(logger.handlers):
        if getattr(existing, '_linearraid_handler', False):
            logger.removeHandler(existing)
    
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._linearraid_handler = True
    logger.addHandler(handler)
    return logger
