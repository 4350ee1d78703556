"""Tests for single-file moves and the cross-device fallback."""

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from frame_mover.config import Config
from frame_mover.exceptions import CrossDeviceFallbackFailure, IoError
from frame_mover.mover import FileMover
from frame_mover.utils import calculate_sha256


def cross_device_rename(src, dst):
    raise OSError(errno.EXDEV, 'Invalid cross-device link', str(src))


def leftovers(directory: Path):
    return sorted(p.name for p in directory.iterdir() if p.name.startswith('.framemove-'))


class TestSameVolumeMove:

    def test_renames_and_creates_parents(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'A/IMG_7612.JPG', b'frame-7612')
        dst = dest_root / 'A' / 'IMG_7612.JPG'

        result = FileMover(sample_config).move(src, dst)

        assert result == dst
        assert dst.read_bytes() == b'frame-7612'
        assert not src.exists()

    def test_other_os_errors_leave_source(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'IMG_1.jpg', b'data')

        with patch('frame_mover.mover.os.rename', side_effect=PermissionError(errno.EACCES, 'denied')):
            with pytest.raises(IoError) as excinfo:
                FileMover(sample_config).move(src, dest_root / 'IMG_1.jpg')

        assert not isinstance(excinfo.value, CrossDeviceFallbackFailure)
        assert src.read_bytes() == b'data'
        assert not (dest_root / 'IMG_1.jpg').exists()

    def test_missing_source_is_io_error(self, sample_config, source_root, dest_root):
        with pytest.raises(IoError):
            FileMover(sample_config).move(source_root / 'gone.jpg', dest_root / 'gone.jpg')


class TestCrossDeviceFallback:

    def test_copies_verifies_and_deletes(self, sample_config, source_root, dest_root, make_file):
        content = b'cross-volume-bytes' * 100
        src = make_file(source_root, 'A/IMG_7612.jpg', content)
        dst = dest_root / 'A' / 'IMG_7612.jpg'

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename):
            FileMover(sample_config).move(src, dst, expected_digest=calculate_sha256(src))

        assert dst.read_bytes() == content
        assert not src.exists()
        assert leftovers(dst.parent) == []

    def test_hash_mismatch_keeps_source_and_cleans_temp(self, sample_config, source_root,
                                                        dest_root, make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'real-content')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename):
            with pytest.raises(IoError, match='verification'):
                FileMover(sample_config).move(src, dest_root / 'IMG_7612.jpg', expected_digest='0' * 64)

        assert src.read_bytes() == b'real-content'
        assert not (dest_root / 'IMG_7612.jpg').exists()
        assert leftovers(dest_root) == []

    def test_size_only_when_verification_disabled(self, write_config, source_root, dest_root, make_file):
        config = Config(str(write_config({'frame_mover': {'verify_copies': False}})))
        src = make_file(source_root, 'IMG_7612.jpg', b'content')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename):
            FileMover(config).move(src, dest_root / 'IMG_7612.jpg', expected_digest='0' * 64)

        assert (dest_root / 'IMG_7612.jpg').read_bytes() == b'content'

    def test_copy_failure_keeps_source(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'content')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch('frame_mover.mover.shutil.copy2', side_effect=OSError(errno.ENOSPC, 'No space')):
            with pytest.raises(IoError) as excinfo:
                FileMover(sample_config).move(src, dest_root / 'IMG_7612.jpg')

        assert not isinstance(excinfo.value, CrossDeviceFallbackFailure)
        assert src.exists()
        assert leftovers(dest_root) == []

    def test_temp_file_creation_failure_is_io_error(self, sample_config, source_root, dest_root,
                                                    make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'content')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch('frame_mover.mover.tempfile.mkstemp',
                      side_effect=PermissionError(errno.EACCES, 'Permission denied')):
            with pytest.raises(IoError, match="Failed to create temporary copy") as excinfo:
                FileMover(sample_config).move(src, dest_root / 'IMG_7612.jpg')

        assert not isinstance(excinfo.value, CrossDeviceFallbackFailure)
        assert excinfo.value.path == src
        assert src.read_bytes() == b'content'
        assert not (dest_root / 'IMG_7612.jpg').exists()

    def test_delete_failure_leaves_both_copies(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'content')
        dst = dest_root / 'IMG_7612.jpg'

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch.object(Path, 'unlink', side_effect=PermissionError(errno.EACCES, 'busy')):
            with pytest.raises(CrossDeviceFallbackFailure) as excinfo:
                FileMover(sample_config).move(src, dst)

        assert excinfo.value.temp_path is None
        assert src.read_bytes() == b'content'
        assert dst.read_bytes() == b'content'

    def test_finalize_failure_keeps_temp_copy(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'content')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch('frame_mover.mover.os.replace', side_effect=OSError(errno.EIO, 'I/O error')):
            with pytest.raises(CrossDeviceFallbackFailure) as excinfo:
                FileMover(sample_config).move(src, dest_root / 'IMG_7612.jpg')

        temp_path = excinfo.value.temp_path
        assert temp_path is not None
        assert temp_path.read_bytes() == b'content'
        assert not src.exists()

    def test_insufficient_space_keeps_source(self, write_config, source_root, dest_root, make_file):
        config = Config(str(write_config({'frame_mover': {'min_free_space_mb': 10}})))
        src = make_file(source_root, 'IMG_7612.jpg', b'x' * 1000)

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch('frame_mover.mover.get_available_space', return_value=1024):
            with pytest.raises(IoError, match='Insufficient space'):
                FileMover(config).move(src, dest_root / 'IMG_7612.jpg')

        assert src.exists()
        assert leftovers(dest_root) == []

    def test_unknown_free_space_does_not_block(self, sample_config, source_root, dest_root, make_file):
        src = make_file(source_root, 'IMG_7612.jpg', b'data')

        with patch('frame_mover.mover.os.rename', side_effect=cross_device_rename), \
                patch('frame_mover.mover.get_available_space', return_value=None):
            FileMover(sample_config).move(src, dest_root / 'IMG_7612.jpg')

        assert (dest_root / 'IMG_7612.jpg').exists()
