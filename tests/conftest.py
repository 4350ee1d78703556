"""Shared fixtures for frame mover tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def source_root(tmp_path):
    """Empty source tree root."""
    path = tmp_path / 'source'
    path.mkdir()
    return path


@pytest.fixture
def dest_root(tmp_path):
    """Empty destination tree root."""
    path = tmp_path / 'dest'
    path.mkdir()
    return path


@pytest.fixture
def config_data():
    """Settings written to the YAML file behind `sample_config`."""
    return {
        'frame_mover': {
            'dry_run': False,
            'hash_chunk_size': 1024,
            'progress_interval': 1,
            'verify_copies': True,
            'min_free_space_mb': 0,
        },
        'logging': {
            'level': 'DEBUG',
        },
    }


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture: write a YAML config file and return its path."""

    def _write(data, filename='framemover.yml'):
        config_path = tmp_path / filename
        with open(config_path, 'w') as f:
            yaml.dump(data, f)
        return config_path

    return _write


@pytest.fixture
def sample_config(write_config, config_data):
    """Config backed by a temporary YAML file."""
    from frame_mover.config import Config
    return Config(str(write_config(config_data)))


@pytest.fixture
def make_file():
    """Factory fixture: create a file with given content under a root."""

    def _create(root: Path, relative_path, content=b'test-content'):
        full_path = root / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        return full_path

    return _create


@pytest.fixture
def snapshot_log():
    """Progress callback that records every snapshot it receives."""

    class _Recorder(list):
        def __call__(self, snapshot):
            self.append(snapshot)

    return _Recorder()


@pytest.fixture
def tree_contents():
    """Function mapping relative path -> bytes for every file under a root."""

    def _contents(root: Path):
        return {
            str(p.relative_to(root)): p.read_bytes()
            for p in sorted(root.rglob('*')) if p.is_file()
        }

    return _contents
