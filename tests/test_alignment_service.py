import pytest

from core.models import CatalogEntry
from core.services.alignment_service import ReductionStats, check_alignment


def _entries(*identifiers):
    return [CatalogEntry.from_dict({"identifier": i}) for i in identifiers]


def test_aligned_sides():
    folders = [
        "msdos_PacMan_1983_A",
        "msdos_PacMan_1983_B",
        "a8b_Pitfall_1982_X",
        "c64_Zork_1980_Y",
    ]
    entries = _entries(
        "msdos_PacMan_1983_A", "msdos_PacMan_1983_B", "a8b_Pitfall_1982", "c64_Zork_1980"
    )
    report = check_alignment(folders, entries, folder_token_count=3, catalog_token_count=3)

    assert report.folders.reduction_percent == pytest.approx(25.0)
    assert report.catalog.reduction_percent == pytest.approx(25.0)
    assert report.difference == pytest.approx(0.0)
    assert not report.is_misaligned
    assert report.shared_base_identifiers == 3
    assert report.folder_samples == [
        ("msdos_PacMan_1983", ["msdos_PacMan_1983_A", "msdos_PacMan_1983_B"])
    ]


def test_miscalibrated_token_counts_are_flagged():
    # Folder names carry an extra publisher token; with one token too few they collapse
    folders = [
        "msdos_Game_1990_Pub",
        "msdos_Game_1991_Pub",
        "msdos_Game_1992_Pub",
        "msdos_Other_1990_Pub",
    ]
    entries = _entries("msdos_Game_1990", "msdos_Game_1991", "msdos_Game_1992", "msdos_Other_1990")
    report = check_alignment(folders, entries, folder_token_count=2, catalog_token_count=3)

    assert report.folders.reduction_percent == pytest.approx(50.0)
    assert report.catalog.reduction_percent == pytest.approx(0.0)
    assert report.is_misaligned


def test_threshold_is_exclusive():
    folders = ["a_1", "a_2", "b_1", "c_1", "d_1", "e_1", "f_1", "g_1", "h_1", "i_1"]
    entries = _entries("a", "b", "c", "d", "e", "f", "g", "h", "i", "j")
    report = check_alignment(folders, entries, 1, 1, threshold=10.0)
    assert report.difference == pytest.approx(10.0)
    assert not report.is_misaligned


def test_entries_without_identifier_are_counted_as_skipped():
    entries = _entries("a_b_c") + [CatalogEntry.from_dict({"title": "x"})]
    report = check_alignment([], entries, 3, 3)
    assert report.catalog.total == 1
    assert report.catalog.skipped == 1
    assert report.folders.reduction_percent == 0.0


def test_reduction_stats_empty():
    stats = ReductionStats("folders", 3, total=0, unique_groups=0, duplicate_groups=0)
    assert stats.reduction_percent == 0.0
