"""Shared fixtures for media sorting tests."""

import os
import struct
from datetime import datetime
from pathlib import Path

import pytest
import yaml

from photo_sorter.config import Config, RunConfig
from photo_sorter.dates import MP4_EPOCH_OFFSET


def build_exif_jpeg(captured: datetime) -> bytes:
    """Minimal JPEG whose APP1 segment carries EXIF DateTimeOriginal."""
    date_bytes = captured.strftime('%Y:%m:%d %H:%M:%S').encode('ascii') + b'\x00'

    # TIFF header (big endian), IFD0 at 8 -> Exif IFD at 26 -> date string at 44
    tiff = b'MM\x00\x2a' + struct.pack('>I', 8)
    tiff += struct.pack('>H', 1)
    tiff += struct.pack('>HHII', 0x8769, 4, 1, 26)
    tiff += struct.pack('>I', 0)
    tiff += struct.pack('>H', 1)
    tiff += struct.pack('>HHII', 0x9003, 2, len(date_bytes), 44)
    tiff += struct.pack('>I', 0)
    tiff += date_bytes

    app1 = b'Exif\x00\x00' + tiff
    return b'\xff\xd8' + b'\xff\xe1' + struct.pack('>H', len(app1) + 2) + app1 + b'\xff\xd9'


def build_mp4(creation_raw: int, version: int = 0) -> bytes:
    """Minimal ISO base media file: ftyp + moov/mvhd with the given creation time."""
    if version == 1:
        body = struct.pack('>B3xQQIQ', 1, creation_raw, creation_raw, 1000, 0)
    else:
        body = struct.pack('>B3xIIII', 0, creation_raw, creation_raw, 1000, 0)
    body += b'\x00' * 80
    mvhd = struct.pack('>I4s', len(body) + 8, b'mvhd') + body
    moov = struct.pack('>I4s', len(mvhd) + 8, b'moov') + mvhd
    ftyp_body = b'isom' + struct.pack('>I', 512) + b'isomiso2mp41'
    ftyp = struct.pack('>I4s', len(ftyp_body) + 8, b'ftyp') + ftyp_body
    free = struct.pack('>I4s', 16, b'free') + b'\x00' * 8
    return ftyp + free + moov


def mp4_raw_time(captured: datetime) -> int:
    """Container creation value for a local datetime."""
    return int(captured.timestamp()) + MP4_EPOCH_OFFSET


def set_mtime(path: Path, when: datetime):
    stamp = when.timestamp()
    os.utime(path, (stamp, stamp))


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / 'source'
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    path = tmp_path / 'dest'
    path.mkdir()
    return path


@pytest.fixture
def create_file(source_dir):
    """Factory fixture: create a source file with content and optional mtime."""

    def _create(relative_path, content=b'test-content', mtime=None):
        full_path = source_dir / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        if mtime is not None:
            set_mtime(full_path, mtime)
        return full_path

    return _create


@pytest.fixture
def create_jpeg(create_file):
    """Factory fixture: JPEG with an EXIF capture date."""

    def _create(relative_path, captured):
        return create_file(relative_path, build_exif_jpeg(captured))

    return _create


@pytest.fixture
def create_mp4(create_file):
    """Factory fixture: MP4 with a movie header creation time."""

    def _create(relative_path, captured, version=0):
        return create_file(relative_path, build_mp4(mp4_raw_time(captured), version))

    return _create


@pytest.fixture
def run_config(source_dir, dest_dir):
    """Factory fixture: RunConfig for the temp source/dest pair."""

    def _make(**overrides):
        settings = {
            'source_root': source_dir,
            'dest_root': dest_dir,
            'workers': 4,
        }
        settings.update(overrides)
        return RunConfig(**settings)

    return _make


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture: write a YAML config file and load it."""

    def _write(data, filename='sort_media.yml'):
        config_path = tmp_path / filename
        with open(config_path, 'w') as f:
            yaml.dump(data, f)
        return Config(str(config_path))

    return _write
