#!/usr/bin/env python3
"""Tests for media sorting configuration using should/when pattern."""

from dataclasses import FrozenInstanceError
from pathlib import Path
from unittest.mock import patch

import pytest

from photo_sorter.config import Config, RunConfig


def test_should_use_defaults_when_no_config_file_exists(tmp_path, monkeypatch):
    """Should fall back to defaults when no config file is found."""
    monkeypatch.chdir(tmp_path)

    with patch('photo_sorter.config.get_cpu_count', return_value=6):
        config = Config()

        assert config.config_path is None
        assert config.get_workers() == 6
    assert config.should_move() is False
    assert config.get_video_category() == 'VIDEO'
    assert config.get_log_level() == 'INFO'
    assert config.get_log_file() == 'sort_media.log'
    assert config.validate_config() == []


def test_should_find_config_file_when_present_in_working_directory(tmp_path, monkeypatch, write_config):
    """Should pick up sort_media.yml from the working directory."""
    write_config({'sorting': {'workers': 3}})
    monkeypatch.chdir(tmp_path)

    config = Config()

    assert Path(config.config_path) == (tmp_path / 'sort_media.yml').resolve()
    assert config.get_workers() == 3


def test_should_prefer_local_config_when_both_exist(tmp_path, monkeypatch, write_config):
    """Should prefer sort_media.local.yml over sort_media.yml."""
    write_config({'sorting': {'workers': 3}})
    write_config({'sorting': {'workers': 5}}, filename='sort_media.local.yml')
    monkeypatch.chdir(tmp_path)

    assert Config().get_workers() == 5


def test_should_read_nested_values_when_using_dot_notation(write_config):
    """Should resolve dotted keys and return defaults for missing ones."""
    config = write_config({
        'sorting': {'move': True, 'video_category': 'Clips'},
        'logging': {'level': 'DEBUG', 'file': '/tmp/sort.log'},
    })

    assert config.get('sorting.move') is True
    assert config.get('sorting.missing', 'fallback') == 'fallback'
    assert config.get('logging.level.too.deep', 'x') == 'x'
    assert config.should_move() is True
    assert config.get_video_category() == 'Clips'
    assert config.get_log_level() == 'DEBUG'
    assert config.get_log_file() == '/tmp/sort.log'


def test_should_report_errors_when_values_invalid(write_config):
    """Should validate workers, move flag, category and free space."""
    config = write_config({
        'sorting': {'workers': 0, 'move': 'yes', 'video_category': ''},
        'safety': {'min_free_space_mb': -1},
    })

    errors = config.validate_config()

    assert len(errors) == 4
    assert any('sorting.workers' in e for e in errors)
    assert any('sorting.move' in e for e in errors)
    assert any('video_category' in e for e in errors)
    assert any('min_free_space_mb' in e for e in errors)


def test_should_raise_when_config_file_missing(tmp_path):
    """Should fail loudly when an explicit config path does not exist."""
    with pytest.raises(OSError):
        Config(str(tmp_path / 'nope.yml'))


def test_should_treat_empty_file_as_defaults(tmp_path):
    """Should accept an empty YAML file."""
    path = tmp_path / 'empty.yml'
    path.write_text('')

    assert Config(str(path)).config == {}


class TestRunConfig:
    """Frozen run settings."""

    def test_flags_override_file_settings(self, write_config, tmp_path):
        config = write_config({'sorting': {'workers': 3, 'move': True}})

        run_config = RunConfig.from_config(config, tmp_path / 'src', tmp_path / 'dst',
                                           move=False, workers=7, logging_enabled=True)

        assert run_config.move_after_copy is False
        assert run_config.workers == 7
        assert run_config.logging_enabled is True
        assert run_config.source_root == (tmp_path / 'src').resolve()

    def test_file_settings_used_when_flags_absent(self, write_config, tmp_path):
        config = write_config({'sorting': {'workers': 3, 'move': True, 'video_category': 'Clips'}})

        run_config = RunConfig.from_config(config, tmp_path, tmp_path)

        assert run_config.move_after_copy is True
        assert run_config.workers == 3
        assert run_config.video_category == 'Clips'

    def test_is_read_only(self, tmp_path):
        run_config = RunConfig(tmp_path, tmp_path)

        with pytest.raises(FrozenInstanceError):
            run_config.workers = 12
        assert run_config.workers == 1
