import pytest

from owlkit.paging import norm_page, norm_page_size


@pytest.mark.parametrize("page, expected", [(0, 1), (-5, 1), (1, 1), (3, 3)])
def test_norm_page(page, expected):
    assert norm_page(page) == expected


@pytest.mark.parametrize(
    "size, expected", [(0, 10), (-1, 10), (50, 50), (100, 100), (101, 100)]
)
def test_norm_page_size(size, expected):
    assert norm_page_size(size) == expected