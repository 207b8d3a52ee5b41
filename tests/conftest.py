"""
Test configuration and shared fixtures for verledger tests
"""
import pytest
import json
import tempfile
import shutil
from pathlib import Path

from system_tools.versioning import FileSystemStorage, create_version_ledger


class RecordingStorage(FileSystemStorage):
    """File system storage that remembers every write"""

    def __init__(self):
        self.writes = []

    async def write_file(self, path, data):
        self.writes.append(Path(path))
        await super().write_file(path, data)


class FailingWriteStorage(FileSystemStorage):
    """Storage whose writes to one file name fail"""

    def __init__(self, failing_name: str):
        self.failing_name = failing_name

    async def write_file(self, path, data):
        if Path(path).name == self.failing_name:
            raise OSError(f"disk full: {path}")
        await super().write_file(path, data)


def write_manifest(project_dir: Path, version: str, **extra) -> Path:
    manifest = project_dir / 'package.json'
    data = {'name': 'demo-project', 'version': version}
    data.update(extra)
    manifest.write_text(json.dumps(data, indent=2) + '\n', encoding='utf-8')
    return manifest


def write_log(project_dir: Path, versions) -> Path:
    log_path = project_dir / '.version-log.json'
    history = [
        {'version': v, 'timestamp': f'2024-01-0{i + 1}T00:00:00.000Z'}
        for i, v in enumerate(versions)
    ]
    log_path.write_text(json.dumps({'history': history}, indent=2), encoding='utf-8')
    return log_path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)

@pytest.fixture
def project_dir(temp_dir):
    """Project with package.json and README.md both at 1.0.0"""
    write_manifest(temp_dir, '1.0.0')
    (temp_dir / 'README.md').write_text(
        "# Demo Project\n\nversion: 1.0.0\n\nInstall with `npm install demo-project`.\n",
        encoding='utf-8'
    )
    return temp_dir

@pytest.fixture
def storage():
    return RecordingStorage()

@pytest.fixture
def ledger(project_dir, storage):
    """VersionLedger for project_dir backed by RecordingStorage"""
    return create_version_ledger(project_dir, storage=storage)
