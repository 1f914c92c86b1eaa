import pytest

from core.services.normalizer import count_tokens, normalize_identifier


@pytest.mark.parametrize(
    "identifier,n,expected",
    [
        ("msdos_PacMan_1983_A", 3, "msdos_PacMan_1983"),
        ("msdos_PacMan_1983_A", 1, "msdos"),
        ("a8b_Ghostbusters_1984_Activision", 4, "a8b_Ghostbusters_1984_Activision"),
        ("Pitfall", 4, "Pitfall"),
        ("a_b", 3, "a_b"),
    ],
)
def test_normalize_identifier(identifier, n, expected):
    assert normalize_identifier(identifier, n) == expected


def test_token_count_law():
    identifier = "x_y_z_w_v"
    total = count_tokens(identifier)
    for n in range(1, total + 1):
        result = normalize_identifier(identifier, n)
        assert count_tokens(result) == n
        assert identifier.startswith(result)
    for n in range(total + 1, total + 4):
        assert normalize_identifier(identifier, n) == identifier


@pytest.mark.parametrize("n", [0, -1])
def test_non_positive_token_count_returns_input(n):
    assert normalize_identifier("a_b_c", n) == "a_b_c"


def test_empty_identifier_returns_empty():
    assert normalize_identifier("", 3) == ""


def test_empty_tokens_are_kept():
    assert normalize_identifier("a__b_c", 2) == "a_"
