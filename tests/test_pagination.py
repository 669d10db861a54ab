import math

import pytest

from app.services.base import (
    PageRequest,
    paginate_results,
    parse_leading_float,
    parse_leading_int,
    resolve_page_request,
    total_pages,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2", 2),
        (" 3abc", 3),
        ("-1", -1),
        ("+4", 4),
        ("1.9", 1),
        ("abc", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_leading_int(raw, expected):
    assert parse_leading_int(raw) == expected


def test_parse_leading_float():
    assert parse_leading_float("40.75") == 40.75
    assert parse_leading_float("-73.98xyz") == -73.98
    assert parse_leading_float(".5") == 0.5
    assert parse_leading_float("north") is None


def test_missing_values_fall_back_to_defaults():
    assert resolve_page_request(None, None) == PageRequest(page=1, limit=10)


def test_non_numeric_and_zero_values_fall_back_to_defaults():
    assert resolve_page_request("abc", "0") == PageRequest(page=1, limit=10)
    assert resolve_page_request("0", "xyz", default_limit=25) == PageRequest(page=1, limit=25)


def test_skip_is_offset_of_previous_pages():
    assert resolve_page_request("3", "5").skip == 10
    assert resolve_page_request("1", "20").skip == 0


def test_negative_values_are_kept():
    page_request = resolve_page_request("-2", "5")
    assert page_request.page == -2
    assert page_request.skip == -15


@pytest.mark.parametrize(
    "total, limit, expected",
    [(0, 10, 0), (20, 10, 2), (21, 10, 3), (15, 5, 3), (1, 100, 1), (7, -5, -1)],
)
def test_total_pages_is_ceiling(total, limit, expected):
    assert total_pages(total, limit) == expected


def test_total_pages_keeps_negative_zero():
    pages = total_pages(0, -5)
    assert pages == 0
    assert math.copysign(1.0, pages) == -1.0


def test_paginate_results_shape():
    body = paginate_results(
        [{"name": "a"}],
        page_request=PageRequest(page=2, limit=5),
        total=15,
        items_key="users",
        total_key="totalUsers",
    )
    assert body == {"users": [{"name": "a"}], "currentPage": 2, "totalPages": 3, "totalUsers": 15}
