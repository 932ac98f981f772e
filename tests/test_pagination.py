"""
Tests for pagination normalization and metadata.
"""

import pytest

from lifecycle_toolkit.soft_delete import PaginationPolicy, ValidationError


@pytest.fixture
def policy():
    return PaginationPolicy(default_size=10, max_size=100)


class TestNormalize:
    """Test page/size normalization."""

    def test_defaults(self, policy):
        window = policy.normalize()

        assert (window.page, window.size) == (1, 10)
        assert (window.offset, window.limit) == (0, 10)

    def test_offset(self, policy):
        window = policy.normalize(3, 10)
        assert window.offset == 20
        assert window.limit == 10

    @pytest.mark.parametrize("page", [0, -1, "", None, "0"])
    def test_non_positive_page_falls_back(self, policy, page):
        assert policy.normalize(page, 10).page == 1

    @pytest.mark.parametrize("size", [0, -5, None, ""])
    def test_non_positive_size_uses_default(self, policy, size):
        assert policy.normalize(1, size).size == 10

    def test_size_clamped(self, policy):
        assert policy.normalize(1, 5000).size == 100

    def test_numeric_strings(self, policy):
        window = policy.normalize("2", " 25 ")
        assert (window.page, window.size, window.offset) == (2, 25, 25)

    def test_integral_float(self, policy):
        assert policy.normalize(2.0, 10).page == 2

    @pytest.mark.parametrize(
        "page,size,field",
        [("abc", 10, "page"), (1, "ten", "size"), (True, 10, "page"), (1, 2.5, "size"), ([1], 10, "page")],
    )
    def test_malformed_values(self, policy, page, size, field):
        with pytest.raises(ValidationError) as exc:
            policy.normalize(page, size)

        assert exc.value.field == field

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            PaginationPolicy(default_size=50, max_size=20)
        with pytest.raises(ValueError):
            PaginationPolicy(default_size=0)


class TestBuildMeta:
    """Test page count calculation."""

    @pytest.mark.parametrize(
        "total,size,pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (23, 10, 3), (101, 100, 2)]
    )
    def test_pages(self, total, size, pages):
        meta = PaginationPolicy.build_meta(1, size, total)

        assert meta.pages == pages
        assert meta.total == total
        assert meta.page_size == size

    def test_page_beyond_last(self):
        meta = PaginationPolicy.build_meta(7, 10, 23)

        assert meta.current == 7
        assert meta.pages == 3

    def test_alias_serialization(self):
        data = PaginationPolicy.build_meta(1, 10, 2).model_dump(by_alias=True)
        assert data == {"current": 1, "pageSize": 10, "pages": 1, "total": 2}
