import builtins

import pytest
from loguru import logger

import main
from tests.helpers import make_folders, read_catalog


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


@pytest.fixture
def cli(tmp_path):
    def run(*args):
        return main.main(
            ["--log-dir", str(tmp_path / "logs"), "--audit-dir", str(tmp_path / "audit"), *args]
        )

    return run


def typed(monkeypatch, text):
    monkeypatch.setattr(builtins, "input", lambda prompt="": text)


def test_check_alignment(cli, pacman_catalog, thumbs_root):
    make_folders(thumbs_root, "msdos_PacMan_1983_A_x", "msdos_PacMan_1983_B_x")
    code = cli("check-alignment", "--catalog", str(pacman_catalog), "--root", str(thumbs_root))
    assert code == main.EXIT_OK


def test_dedup_catalog_preview(cli, pacman_catalog, tmp_path):
    assert cli("dedup-catalog", "--catalog", str(pacman_catalog)) == main.EXIT_OK
    assert not (tmp_path / "catalog_deduplicated.json").exists()
    assert list((tmp_path / "audit").glob("dedup-catalog_*_summary.txt"))
    assert list((tmp_path / "logs").glob("curator_*.log"))


def test_dedup_catalog_execute(cli, pacman_catalog, tmp_path, monkeypatch):
    typed(monkeypatch, "SAVE")
    code = cli("dedup-catalog", "--catalog", str(pacman_catalog), "--execute")

    assert code == main.EXIT_OK
    assert len(read_catalog(tmp_path / "catalog_deduplicated.json")) == 1


def test_token_override(cli, pacman_catalog, tmp_path, monkeypatch):
    typed(monkeypatch, "SAVE")
    out = tmp_path / "out.json"
    code = cli(
        "dedup-catalog",
        "--catalog",
        str(pacman_catalog),
        "--output",
        str(out),
        "--tokens",
        "4",
        "--execute",
    )

    assert code == main.EXIT_OK
    assert len(read_catalog(out)) == 2


def test_wrong_confirmation_cancels(cli, pacman_catalog, tmp_path, monkeypatch):
    typed(monkeypatch, "save")
    code = cli("dedup-catalog", "--catalog", str(pacman_catalog), "--execute")

    assert code == main.EXIT_CANCELLED
    assert not (tmp_path / "catalog_deduplicated.json").exists()


def test_organize_years_execute(cli, pacman_catalog, thumbs_root, monkeypatch):
    make_folders(thumbs_root, "msdos_PacMan_1983_A", "Unlisted")
    typed(monkeypatch, "MOVE")
    code = cli(
        "organize-years", "--catalog", str(pacman_catalog), "--root", str(thumbs_root), "--execute"
    )

    assert code == main.EXIT_OK
    assert (thumbs_root / "1983" / "msdos_PacMan_1983_A").is_dir()
    assert (thumbs_root / "Unlisted").is_dir()


def test_all_mutations_failing(cli, pacman_catalog, thumbs_root, tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder")
    typed(monkeypatch, "SAVE")
    code = cli(
        "update-paths",
        "--catalog",
        str(pacman_catalog),
        "--root",
        str(thumbs_root),
        "--output",
        str(blocker / "out.json"),
        "--execute",
    )
    assert code == main.EXIT_FAILED


def test_missing_catalog(cli, tmp_path):
    assert cli("dedup-catalog", "--catalog", str(tmp_path / "nope.json")) == main.EXIT_FATAL


def test_missing_root(cli, pacman_catalog, tmp_path):
    code = cli("organize-years", "--catalog", str(pacman_catalog), "--root", str(tmp_path / "x"))
    assert code == main.EXIT_FATAL


def test_bad_settings(cli, pacman_catalog, tmp_path):
    settings = tmp_path / "settings.json"
    settings.write_text("[]")
    code = cli("--settings", str(settings), "dedup-catalog", "--catalog", str(pacman_catalog))
    assert code == main.EXIT_FATAL


def test_command_is_required(cli):
    with pytest.raises(SystemExit):
        cli()


def test_closed_stdin_cancels(cli, pacman_catalog, tmp_path, monkeypatch):
    def closed(prompt=""):
        raise EOFError

    monkeypatch.setattr(builtins, "input", closed)
    code = cli("dedup-catalog", "--catalog", str(pacman_catalog), "--execute")

    assert code == main.EXIT_CANCELLED
    assert not (tmp_path / "catalog_deduplicated.json").exists()
