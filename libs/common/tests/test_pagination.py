from agentgraph_common.base.pagination import Pagination, PaginationInfo


class TestPagination:
    def test_defaults(self):
        pagination = Pagination.from_params()
        assert pagination.page == 1
        assert pagination.limit == 10
        assert pagination.offset == 0

    def test_limit_is_clamped_to_maximum(self):
        assert Pagination.from_params(limit=500).limit == 100

    def test_zero_limit_uses_default(self):
        assert Pagination.from_params(limit=0).limit == 10

    def test_negative_limit_is_raised_to_one(self):
        assert Pagination.from_params(limit=-5).limit == 1

    def test_page_below_one_becomes_one(self):
        assert Pagination.from_params(page=0).page == 1
        assert Pagination.from_params(page=-3).page == 1

    def test_offset(self):
        assert Pagination.from_params(page=3, limit=20).offset == 40

    def test_pages_rounds_up(self):
        info = PaginationInfo.build(Pagination.from_params(page=1, limit=10), total=21)
        assert info.pages == 3
        assert info.total == 21

    def test_no_rows_means_no_pages(self):
        assert PaginationInfo.build(Pagination(), total=0).pages == 0
