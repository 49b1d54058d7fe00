#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
集成测试

模拟多文件分片下载: 固定宽度的分片不与文件边界对齐，
按分片编号写入后逐文件校验内容。
"""

import hashlib
import os

import pytest

from linearraid import LinearStream, BoundaryError, layout_from_paths


PIECE_SIZE = 7


@pytest.fixture
def payload():
    """跨越 3 个文件的原始数据"""
    return bytes(range(256)) * 3 + os.urandom(50)


@pytest.fixture
def file_sizes():
    return [300, 1, 517]


class TestPieceRoundTrip:
    """分片写入与读取"""
    
    def test_write_pieces_out_of_order(self, tmp_path, payload, file_sizes):
        """乱序写入分片后，各物理文件内容与原始数据一致"""
        assert sum(file_sizes) == len(payload)
        paths = [tmp_path / f"part{i}.dat" for i in range(len(file_sizes))]
        layout = [(str(p), size) for p, size in zip(paths, file_sizes)]
        
        piece_count = (len(payload) + PIECE_SIZE - 1) // PIECE_SIZE
        order = list(range(piece_count))[::-1]
        
        with LinearStream('w+b', layout) as stream:
            for index in order:
                piece = payload[index * PIECE_SIZE:(index + 1) * PIECE_SIZE]
                assert stream.write_record(index, piece, PIECE_SIZE) == len(piece)
            
            assert stream.read_at(0, len(payload)) == payload
        
        offset = 0
        for path, size in zip(paths, file_sizes):
            expected = payload[offset:offset + size]
            assert hashlib.md5(path.read_bytes()).digest() == hashlib.md5(expected).digest()
            offset += size
    
    def test_read_pieces_match_slices(self, make_files, payload, file_sizes):
        """按分片编号读取，结果等于原始数据切片"""
        contents = {}
        offset = 0
        for i, size in enumerate(file_sizes):
            contents[f"part{i}.dat"] = payload[offset:offset + size]
            offset += size
        paths = make_files(contents)
        layout = layout_from_paths(paths[f"part{i}.dat"] for i in range(len(file_sizes)))
        
        with LinearStream('rb', layout) as stream:
            assert stream.total_length == len(payload)
            for index in range(0, len(payload) // PIECE_SIZE + 1):
                expected = payload[index * PIECE_SIZE:(index + 1) * PIECE_SIZE]
                assert stream.read_record(index, PIECE_SIZE) == expected
    
    def test_overflowing_piece_rejected(self, tmp_path, file_sizes):
        """最后一个分片超过总容量时报错"""
        layout = [(str(tmp_path / f"p{i}"), size) for i, size in enumerate(file_sizes)]
        total = sum(file_sizes)
        
        with LinearStream('w+b', layout) as stream:
            stream.seek(total - 3)
            with pytest.raises(BoundaryError) as exc_info:
                stream.write(b"\xff" * PIECE_SIZE)
            assert exc_info.value.written == 3
