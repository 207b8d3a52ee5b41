"""
Unit tests for VersionLedger functionality
"""
import pytest
import json
from pathlib import Path

from system_tools.versioning import (
    DuplicateVersion,
    HistoryOrderError,
    InvalidLogStructure,
    InvalidManifest,
    InvalidSemanticVersion,
    NoReferencesUpdated,
    ReferenceUpdateError,
    SemanticVersion,
    VersionRegression,
    create_version_ledger,
    bump_version,
    get_version_string,
)
from system_tools.versioning.version_manager import EXTERNAL_CHANGE_NOTES, INITIAL_VERSION_NOTES

from conftest import FailingWriteStorage, write_log, write_manifest


def read_log(project_dir: Path):
    return json.loads((project_dir / '.version-log.json').read_text(encoding='utf-8'))


class TestCurrentVersion:
    """Test reading the canonical manifest"""

    @pytest.mark.asyncio
    async def test_get_current_version(self, ledger):
        assert await ledger.get_current_version() == SemanticVersion(1, 0, 0)

    @pytest.mark.asyncio
    async def test_malformed_manifest_version(self, ledger, project_dir):
        write_manifest(project_dir, '1.0')
        with pytest.raises(InvalidSemanticVersion):
            await ledger.get_current_version()

    @pytest.mark.asyncio
    async def test_manifest_without_version(self, ledger, project_dir):
        (project_dir / 'package.json').write_text('{"name": "demo"}', encoding='utf-8')
        with pytest.raises(InvalidManifest):
            await ledger.get_current_version()

    @pytest.mark.asyncio
    async def test_manifest_with_non_string_version(self, ledger, project_dir):
        (project_dir / 'package.json').write_text('{"name": "demo", "version": 1}', encoding='utf-8')
        with pytest.raises(InvalidManifest):
            await ledger.get_current_version()

    @pytest.mark.asyncio
    async def test_yaml_manifest(self, temp_dir):
        (temp_dir / 'chart.yaml').write_text('name: demo\nversion: 0.3.1\n', encoding='utf-8')
        ledger = create_version_ledger(temp_dir, manifest='chart.yaml')
        assert await ledger.get_current_version() == SemanticVersion(0, 3, 1)


class TestEnsureCurrentVersionValid:
    """Test reconciliation between the manifest and the log"""

    @pytest.mark.asyncio
    async def test_initializes_empty_history(self, ledger, project_dir):
        entry = await ledger.ensure_current_version_valid()

        assert entry.version == SemanticVersion(1, 0, 0)
        assert entry.notes == INITIAL_VERSION_NOTES
        history = read_log(project_dir)['history']
        assert len(history) == 1
        assert history[0]['version'] == '1.0.0'
        assert history[0]['timestamp'].endswith('Z')

    @pytest.mark.asyncio
    async def test_idempotent(self, ledger, storage):
        await ledger.ensure_current_version_valid()
        writes_after_first = len(storage.writes)

        assert await ledger.ensure_current_version_valid() is None
        assert len(storage.writes) == writes_after_first == 1

    @pytest.mark.asyncio
    async def test_records_external_change(self, ledger, project_dir):
        write_log(project_dir, ['1.0.0'])
        write_manifest(project_dir, '1.2.0')

        entry = await ledger.ensure_current_version_valid()

        assert entry.notes == EXTERNAL_CHANGE_NOTES
        assert [e['version'] for e in read_log(project_dir)['history']] == ['1.0.0', '1.2.0']

    @pytest.mark.asyncio
    async def test_regression_is_rejected(self, ledger, project_dir, storage):
        write_log(project_dir, ['1.0.0', '2.0.0'])

        with pytest.raises(VersionRegression):
            await ledger.ensure_current_version_valid()
        assert storage.writes == []


class TestAddCurrentVersion:
    """Test appending the manifest version"""

    @pytest.mark.asyncio
    async def test_add_to_empty_log(self, ledger):
        entry = await ledger.add_current_version('first release')
        assert entry.version == SemanticVersion(1, 0, 0)
        assert entry.notes == 'first release'

    @pytest.mark.asyncio
    async def test_duplicate_version(self, ledger):
        await ledger.add_current_version()
        with pytest.raises(DuplicateVersion):
            await ledger.add_current_version()

    @pytest.mark.asyncio
    async def test_duplicate_is_silent_for_ensure(self, ledger, storage):
        await ledger.add_current_version()
        assert await ledger.ensure_current_version_valid() is None
        assert len(storage.writes) == 1

    @pytest.mark.asyncio
    async def test_regression(self, ledger, project_dir):
        await ledger.add_current_version()
        write_manifest(project_dir, '0.9.0')

        with pytest.raises(VersionRegression):
            await ledger.add_current_version()

    @pytest.mark.asyncio
    async def test_notes_omitted_when_absent(self, ledger, project_dir):
        await ledger.add_current_version()
        assert 'notes' not in read_log(project_dir)['history'][0]


class TestHistory:
    """Test log loading and validation"""

    @pytest.mark.asyncio
    async def test_missing_log_is_empty(self, ledger, project_dir):
        assert await ledger.list_history() == []
        assert not (project_dir / '.version-log.json').exists()

    @pytest.mark.asyncio
    async def test_round_trip(self, ledger, project_dir):
        write_log(project_dir, ['0.1.0', '0.02.0', '1.0.0'])

        history = await ledger.list_history()

        assert [str(entry.version) for entry in history] == ['0.1.0', '0.2.0', '1.0.0']
        assert ledger.cached_history == history

    @pytest.mark.asyncio
    async def test_recorded_versions_read_back_in_order(self, ledger, project_dir):
        for version in ['0.1.0', '0.2.0', '1.0.0']:
            write_manifest(project_dir, version)
            await ledger.add_current_version(f'release {version}')

        history = await ledger.list_history()

        assert [str(entry.version) for entry in history] == ['0.1.0', '0.2.0', '1.0.0']
        assert [entry.notes for entry in history] == ['release 0.1.0', 'release 0.2.0', 'release 1.0.0']
        assert [e['version'] for e in read_log(project_dir)['history']] == ['0.1.0', '0.2.0', '1.0.0']

    @pytest.mark.asyncio
    async def test_appending_normalizes_existing_entries(self, ledger, project_dir):
        write_log(project_dir, ['0.01.0'])
        await ledger.add_current_version()
        assert [e['version'] for e in read_log(project_dir)['history']] == ['0.1.0', '1.0.0']

    @pytest.mark.asyncio
    async def test_out_of_order_history(self, ledger, project_dir):
        write_log(project_dir, ['1.0.0', '0.5.0'])

        with pytest.raises(HistoryOrderError) as exc_info:
            await ledger.validate_history()
        assert exc_info.value.position == 1
        assert 'position 1' in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_out_of_order_history_on_every_read_path(self, ledger, project_dir):
        write_log(project_dir, ['1.0.0', '0.5.0'])

        with pytest.raises(InvalidLogStructure):
            await ledger.list_history()
        with pytest.raises(InvalidLogStructure):
            await ledger.ensure_current_version_valid()
        with pytest.raises(InvalidLogStructure):
            await ledger.add_current_version()
        with pytest.raises(InvalidLogStructure):
            await ledger.recommend_next_version('patch')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('content', [
        'not json',
        '[]',
        '{"history": {}}',
        '{"entries": []}',
        '{"history": ["1.0.0"]}',
        '{"history": [{"version": 1, "timestamp": "2024-01-01T00:00:00Z"}]}',
        '{"history": [{"version": "1.0.0"}]}',
        '{"history": [{"version": "1.0.0", "timestamp": "2024-01-01T00:00:00Z", "notes": 5}]}',
    ])
    async def test_invalid_log_structure(self, ledger, project_dir, content):
        (project_dir / '.version-log.json').write_text(content, encoding='utf-8')
        with pytest.raises(InvalidLogStructure):
            await ledger.list_history()

    @pytest.mark.asyncio
    async def test_malformed_logged_version(self, ledger, project_dir):
        write_log(project_dir, ['1.0.0-beta'])
        with pytest.raises(InvalidSemanticVersion):
            await ledger.validate_history()


class TestRecommendNextVersion:
    """Test next-version recommendations"""

    @pytest.mark.asyncio
    async def test_from_history(self, ledger, project_dir, storage):
        write_log(project_dir, ['2.0.0', '2.4.1'])

        assert await ledger.recommend_next_version('patch') == SemanticVersion(2, 4, 2)
        assert await ledger.recommend_next_version('minor') == SemanticVersion(2, 5, 0)
        assert await ledger.recommend_next_version('major') == SemanticVersion(3, 0, 0)
        assert storage.writes == []

    @pytest.mark.asyncio
    async def test_from_empty_history(self, ledger):
        assert await ledger.recommend_next_version('patch') == SemanticVersion(0, 0, 1)

    @pytest.mark.asyncio
    async def test_unknown_level(self, ledger):
        with pytest.raises(ValueError):
            await ledger.recommend_next_version('huge')

    def test_compare_versions(self, ledger):
        assert ledger.compare_versions('1.2.3', '1.3.0') == -1
        assert ledger.compare_versions(SemanticVersion(2, 0, 0), '1.3.0') == 1
        assert ledger.compare_versions('1.0.0', '1.0.0') == 0


class TestIncrementVersion:
    """Test the full bump flow"""

    @pytest.mark.asyncio
    async def test_increment_minor(self, ledger, project_dir):
        await ledger.ensure_current_version_valid()

        new_version = await ledger.increment_version('minor', 'feature release')

        assert new_version == SemanticVersion(1, 1, 0)
        manifest = json.loads((project_dir / 'package.json').read_text(encoding='utf-8'))
        assert manifest['version'] == '1.1.0'
        assert manifest['name'] == 'demo-project'
        assert 'version: 1.1.0' in (project_dir / 'README.md').read_text(encoding='utf-8')
        history = read_log(project_dir)['history']
        assert [e['version'] for e in history] == ['1.0.0', '1.1.0']
        assert history[-1]['notes'] == 'feature release'

    @pytest.mark.asyncio
    async def test_no_references_updated(self, ledger, project_dir):
        write_log(project_dir, ['0.9.0'])
        # Files are already at 1.0.0, so a patch bump to 0.9.1 finds nothing behind.
        with pytest.raises(NoReferencesUpdated):
            await ledger.increment_version('patch')
        assert [e['version'] for e in read_log(project_dir)['history']] == ['0.9.0']

    @pytest.mark.asyncio
    async def test_no_files_to_track(self, temp_dir):
        write_manifest(temp_dir, '1.0.0')
        ledger = create_version_ledger(temp_dir, reference_files={'README.md': 'free_text'})
        with pytest.raises(NoReferencesUpdated):
            await ledger.increment_version('patch')

    @pytest.mark.asyncio
    async def test_failed_reference_update_is_not_logged_or_rolled_back(self, project_dir):
        write_log(project_dir, ['1.0.0'])
        ledger = create_version_ledger(project_dir, storage=FailingWriteStorage('README.md'))

        with pytest.raises(ReferenceUpdateError) as exc_info:
            await ledger.increment_version('patch')

        assert [update.file_path.name for update in exc_info.value.updates] == ['package.json']
        manifest = json.loads((project_dir / 'package.json').read_text(encoding='utf-8'))
        assert manifest['version'] == '1.0.1'
        assert 'version: 1.0.0' in (project_dir / 'README.md').read_text(encoding='utf-8')
        assert [e['version'] for e in read_log(project_dir)['history']] == ['1.0.0']


class TestConvenienceFunctions:
    """Test synchronous wrappers"""

    def test_get_version_string(self, project_dir):
        assert get_version_string(project_dir) == '1.0.0'

    def test_bump_version(self, project_dir):
        write_log(project_dir, ['1.0.0'])
        assert bump_version('major', notes='breaking', project_root=project_dir) == '2.0.0'
        assert get_version_string(project_dir) == '2.0.0'
