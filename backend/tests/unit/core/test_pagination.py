"""
Unit Tests for pagination helpers
"""
from mosqueconnect.utils.pagination import build_pagination, paginate_list


class TestBuildPagination:

    def test_pages_round_up(self):
        info = build_pagination(page=1, limit=10, total_items=21, count=10)

        assert info.total == 3
        assert info.count == 10
        assert info.total_items == 21

    def test_empty_result_has_one_page(self):
        info = build_pagination(page=1, limit=10, total_items=0, count=0)
        assert info.total == 1

    def test_serializes_total_items_as_camel_case(self):
        data = build_pagination(page=2, limit=5, total_items=7, count=2).model_dump(by_alias=True)
        assert data == {"current": 2, "total": 2, "count": 2, "limit": 5, "totalItems": 7}


class TestPaginateList:

    def test_last_page_is_partial(self):
        items, info = paginate_list(list(range(23)), page=3, limit=10)

        assert items == [20, 21, 22]
        assert info.count == 3
        assert info.count <= info.limit

    def test_limit_is_capped(self):
        items, info = paginate_list(list(range(150)), page=1, limit=500)

        assert info.limit == 100
        assert len(items) == 100

    def test_page_past_the_end_is_empty(self):
        items, info = paginate_list([1, 2], page=4, limit=10)

        assert items == []
        assert info.count == 0
