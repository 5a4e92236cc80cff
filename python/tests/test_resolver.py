"""
Resolver Tests - ROM archive presence checks for arcade definitions.
"""

from pathlib import Path

import pytest

from coreindex.models import RomReference
from coreindex.resolver import (
    candidate_dirs, is_reference_satisfied, resolve_dependencies,
)


@pytest.fixture
def mra_dir(temp_dir: Path) -> Path:
    d = temp_dir / "_Arcade"
    (d / "mame").mkdir(parents=True)
    (d / "hbmame").mkdir()
    return d


def refs(*zips):
    return [RomReference(zip=z) for z in zips]


class TestCandidateDirs:

    def test_search_order(self, mra_dir):
        assert candidate_dirs(mra_dir) == [mra_dir, mra_dir / "mame", mra_dir / "hbmame"]

    def test_custom_search_dirs(self, mra_dir):
        assert candidate_dirs(mra_dir, ["roms"]) == [mra_dir, mra_dir / "roms"]


class TestIsReferenceSatisfied:

    @pytest.mark.parametrize("location", [".", "mame", "hbmame"])
    def test_found_in_any_candidate_dir(self, mra_dir, location):
        (mra_dir / location / "b.zip").write_bytes(b"PK")

        assert is_reference_satisfied(RomReference("a.zip|b.zip"), mra_dir)

    def test_absent_everywhere(self, mra_dir):
        assert not is_reference_satisfied(RomReference("a.zip|b.zip"), mra_dir)

    def test_other_subdirectories_are_not_searched(self, mra_dir):
        (mra_dir / "roms").mkdir()
        (mra_dir / "roms" / "a.zip").write_bytes(b"PK")

        assert not is_reference_satisfied(RomReference("a.zip"), mra_dir)


class TestResolveDependencies:

    def test_example_from_console_tree(self, mra_dir):
        (mra_dir / "mame" / "rom2.zip").write_bytes(b"PK")

        kept, found = resolve_dependencies(mra_dir, refs("rom1.zip|rom2.zip"))

        assert kept == refs("rom1.zip|rom2.zip")
        assert found is True

    def test_empty_references_are_dropped(self, mra_dir):
        (mra_dir / "a.zip").write_bytes(b"PK")

        kept, found = resolve_dependencies(mra_dir, refs("", "a.zip", ""))

        assert kept == refs("a.zip")
        assert found is True

    def test_only_empty_references_is_satisfied(self, mra_dir):
        kept, found = resolve_dependencies(mra_dir, refs("", ""))

        assert kept == []
        assert found is True

    def test_no_references_is_satisfied(self, mra_dir):
        assert resolve_dependencies(mra_dir, []) == ([], True)

    def test_missing_reference_keeps_all_entries(self, mra_dir):
        """A failure stops probing but every non-empty reference is kept in order."""
        (mra_dir / "c.zip").write_bytes(b"PK")

        kept, found = resolve_dependencies(mra_dir, refs("missing.zip", "", "c.zip"))

        assert kept == refs("missing.zip", "c.zip")
        assert found is False

    def test_all_must_be_satisfied(self, mra_dir):
        (mra_dir / "a.zip").write_bytes(b"PK")

        _, found = resolve_dependencies(mra_dir, refs("a.zip", "b.zip"))

        assert found is False

    def test_probing_stops_at_first_miss(self, mra_dir, monkeypatch):
        calls = []

        def fake_exists(path):
            calls.append(Path(path).name)
            return False

        monkeypatch.setattr("coreindex.resolver.os.path.exists", fake_exists)

        resolve_dependencies(mra_dir, refs("a.zip", "b.zip"))

        assert "b.zip" not in calls
        assert calls.count("a.zip") == 3
