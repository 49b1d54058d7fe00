#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Table 模块测试

测试物理文件表与虚拟地址空间映射。
"""

import pytest

from linearraid.core.table import FileTable, PhysicalFileEntry, Span


def build_table(sizes):
    """按声明大小构建文件表 (句柄不会被访问)"""
    return FileTable([
        PhysicalFileEntry(f"file{i}", size, None, i)
        for i, size in enumerate(sizes)
    ])


# ==================== total_length 测试 ====================

class TestTotalLength:
    """总长度测试"""
    
    @pytest.mark.parametrize("sizes,expected", [
        ([], 0),
        ([0], 0),
        ([5], 5),
        ([5, 5], 10),
        ([100_000, 50_000, 125_000], 275_000),
        ([0, 3, 0, 4], 7),
    ])
    def test_sum_of_declared_sizes(self, sizes, expected):
        """总长度为声明大小之和"""
        assert build_table(sizes).total_length == expected
    
    def test_entries_are_immutable_tuple(self):
        """条目列表不可修改"""
        table = build_table([1, 2])
        assert isinstance(table.entries, tuple)
        assert len(table) == 2
        assert [e.path for e in table] == ["file0", "file1"]


# ==================== locate 测试 ====================

class TestLocate:
    """locate 测试"""
    
    @pytest.mark.parametrize("position,expected", [
        (0, (0, 0)),
        (4, (0, 4)),
        (5, (1, 0)),
        (9, (1, 4)),
    ])
    def test_two_segments(self, position, expected):
        """两个等长段"""
        assert build_table([5, 5]).locate(position) == expected
    
    @pytest.mark.parametrize("position,expected", [
        (0, (1, 0)),
        (2, (1, 2)),
        (3, (3, 0)),
        (6, (3, 3)),
    ])
    def test_skips_zero_size_segments(self, position, expected):
        """零大小的段永远不会被选中"""
        assert build_table([0, 3, 0, 4, 0]).locate(position) == expected
    
    @pytest.mark.parametrize("position", [-1, 10, 11, 1000])
    def test_out_of_range(self, position):
        """越界位置抛出 IndexError"""
        with pytest.raises(IndexError):
            build_table([5, 5]).locate(position)
    
    def test_empty_table(self):
        """空表没有可定位的位置"""
        with pytest.raises(IndexError):
            build_table([]).locate(0)
    
    def test_segment_start(self):
        """段起始偏移"""
        table = build_table([3, 0, 4])
        assert [table.segment_start(i) for i in range(3)] == [0, 3, 3]


# ==================== iter_spans 测试 ====================

class TestIterSpans:
    """iter_spans 测试"""
    
    def test_within_one_segment(self):
        """请求落在单个段内"""
        spans = list(build_table([5, 5]).iter_spans(1, 3))
        assert spans == [Span(0, 1, 3, 1)]
    
    def test_across_boundary(self):
        """跨越段边界"""
        spans = list(build_table([5, 5]).iter_spans(3, 4))
        assert spans == [Span(0, 3, 2, 3), Span(1, 0, 2, 5)]
    
    def test_across_many_segments(self):
        """跨越多个段 (含零大小段)"""
        spans = list(build_table([2, 0, 2, 2]).iter_spans(1, 4))
        assert spans == [Span(0, 1, 1, 1), Span(2, 0, 2, 2), Span(3, 0, 1, 4)]
    
    def test_clipped_at_total_length(self):
        """到达末尾后停止，不查找越界位置"""
        spans = list(build_table([5, 5]).iter_spans(8, 100))
        assert spans == [Span(1, 3, 2, 8)]
        assert sum(s.size for s in spans) == 2
    
    @pytest.mark.parametrize("position", [10, 15])
    def test_at_or_past_end(self, position):
        """从末尾或之后开始时不产出任何 Span"""
        assert list(build_table([5, 5]).iter_spans(position, 3)) == []
    
    def test_zero_length(self):
        """零长度请求"""
        assert list(build_table([5, 5]).iter_spans(0, 0)) == []
