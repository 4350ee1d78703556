"""Tests for the framemove command line interface."""

import json
import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

import framemove
from frame_mover.exceptions import IoError
from frame_mover.utils import calculate_sha256


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to CliRunner's captured streams."""
    yield
    root_logger = logging.getLogger()
    for handler in (framemove._console_handler, framemove._file_handler):
        if handler is not None:
            root_logger.removeHandler(handler)
            handler.close()
    framemove._console_handler = None
    framemove._file_handler = None


@pytest.fixture
def config_file(write_config, config_data):
    return str(write_config(config_data))


def invoke(config_file, *args):
    return CliRunner().invoke(framemove.cli, ['--config', config_file, *args])


class TestMoveCommand:

    def test_moves_matching_files(self, config_file, source_root, dest_root, make_file):
        make_file(source_root, 'A/IMG_7612.JPG', b'frame')
        make_file(source_root, 'A/IMG_7613.JPG', b'other')

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root), '-x', '7612')

        assert result.exit_code == 0, result.output
        assert (dest_root / 'A' / 'IMG_7612.JPG').read_bytes() == b'frame'
        assert not (source_root / 'A' / 'IMG_7612.JPG').exists()
        assert (source_root / 'A' / 'IMG_7613.JPG').exists()
        assert "FRAME MOVER SUMMARY REPORT" in result.output
        assert "Moved 1 files" in result.output

    def test_dry_run_leaves_files(self, config_file, source_root, dest_root, make_file,
                                  tree_contents):
        make_file(source_root, 'A/IMG_7612.JPG', b'frame')
        before = tree_contents(source_root)

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                        '-x', '7612', '--dry-run')

        assert result.exit_code == 0, result.output
        assert tree_contents(source_root) == before
        assert tree_contents(dest_root) == {}
        assert "DRY RUN" in result.output
        assert "Would move 1 files" in result.output

    def test_dry_run_default_from_config(self, write_config, config_data, source_root, dest_root,
                                         make_file):
        config_data['frame_mover']['dry_run'] = True
        config_file = str(write_config(config_data, 'dry.yml'))
        make_file(source_root, 'IMG_7612.jpg')

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root), '-x', '7612')

        assert result.exit_code == 0, result.output
        assert (source_root / 'IMG_7612.jpg').exists()

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                        '-x', '7612', '--no-dry-run')

        assert result.exit_code == 0, result.output
        assert (dest_root / 'IMG_7612.jpg').exists()

    def test_per_file_errors_exit_one(self, config_file, source_root, dest_root, make_file):
        make_file(source_root, 'IMG_7612.jpg', b'bad')
        make_file(source_root, 'IMG_7605.jpg', b'good')

        def flaky_hash(path, chunk_size=65536):
            if path.name == 'IMG_7612.jpg':
                raise IoError(f"Failed to read {path}", path)
            return calculate_sha256(path, chunk_size)

        with patch('frame_mover.engine.calculate_sha256', side_effect=flaky_hash):
            result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                            '-x', '7612,7605')

        assert result.exit_code == 1, result.output
        assert (dest_root / 'IMG_7605.jpg').exists()
        assert (source_root / 'IMG_7612.jpg').exists()
        assert "ERRORS ENCOUNTERED" in result.output
        assert "Completed with 1 errors" in result.output

    @pytest.mark.parametrize('suffixes', ['', 'abc, x1'])
    def test_invalid_suffixes_exit_two(self, config_file, source_root, dest_root, suffixes):
        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                        '-x', suffixes)

        assert result.exit_code == 2, result.output
        assert "ERROR:" in result.output

    def test_same_directory_exit_two(self, config_file, source_root):
        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(source_root), '-x', '1')

        assert result.exit_code == 2
        assert "same directory" in result.output

    def test_missing_destination_exit_two(self, config_file, source_root, tmp_path):
        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(tmp_path / 'nope'),
                        '-x', '1')

        assert result.exit_code == 2

    def test_saves_report(self, config_file, source_root, dest_root, make_file, tmp_path):
        make_file(source_root, 'IMG_7612.jpg')
        report_path = tmp_path / 'report.json'

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                        '-x', '7612', '--report', str(report_path))

        assert result.exit_code == 0, result.output
        with open(report_path) as f:
            data = json.load(f)
        assert data['statistics']['moved'] == 1
        assert data['statistics']['phase'] == 'done'

    def test_progress_bar_option(self, config_file, source_root, dest_root, make_file):
        make_file(source_root, 'IMG_7612.jpg')

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root),
                        '-x', '7612', '--progress')

        assert result.exit_code == 0, result.output
        assert (dest_root / 'IMG_7612.jpg').exists()


class TestConfigHandling:

    def test_invalid_config_exit_two(self, write_config, config_data, source_root, dest_root):
        config_data['frame_mover']['hash_chunk_size'] = 0
        config_file = str(write_config(config_data, 'bad.yml'))

        result = invoke(config_file, 'move', '-s', str(source_root), '-d', str(dest_root), '-x', '1')

        assert result.exit_code == 2
        assert "Configuration validation failed" in result.output

    def test_missing_config_file_exit_two(self, tmp_path):
        result = invoke(str(tmp_path / 'absent.yml'), 'show-config')

        assert result.exit_code == 2
        assert "Failed to load configuration" in result.output

    def test_show_config(self, config_file):
        result = invoke(config_file, 'show-config')

        assert result.exit_code == 0, result.output
        assert f"Configuration file: {config_file}" in result.output
        assert "hash_chunk_size: 1024" in result.output

    def test_log_dir_creates_log_file(self, write_config, config_data, tmp_path):
        config_data['logging']['log_dir'] = str(tmp_path / 'logs')
        config_file = str(write_config(config_data, 'logs.yml'))

        result = invoke(config_file, 'show-config')

        assert result.exit_code == 0, result.output
        assert (tmp_path / 'logs' / 'framemove.log').exists()
