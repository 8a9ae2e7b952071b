"""Tests for design request validation."""

from checkmyindex.models.index import IndexType
from checkmyindex.models.request import DesignRequest
from checkmyindex.services.request_validator import RequestValidator


def _request(pool, **kwargs):
    params = dict(pool_i7=pool, nb_samples=6, multiplexing_rate=3, chemistry=4)
    params.update(kwargs)
    return DesignRequest(**params)


class TestRequestValidator:
    def test_valid_request(self, make_pool):
        result = RequestValidator.validate(_request(make_pool(3, 3)))
        assert result.is_valid
        assert result.errors == []

    def test_samples_not_multiple_of_rate(self, make_pool):
        result = RequestValidator.validate(_request(make_pool(3, 3), nb_samples=7))
        assert result.errors == ["Number of samples must be a multiple of the multiplexing rate."]

    def test_too_few_samples(self, make_pool):
        result = RequestValidator.validate(
            _request(make_pool(3, 3), nb_samples=1, multiplexing_rate=1)
        )
        assert not result.is_valid

    def test_rate_must_be_positive(self, make_pool):
        result = RequestValidator.validate(_request(make_pool(3, 3), multiplexing_rate=0))
        assert any("positive integer" in e for e in result.errors)

    def test_rate_higher_than_i5_pool(self, make_pool):
        request = _request(make_pool(3, 3), pool_i5=make_pool(1, 1, IndexType.I5))
        result = RequestValidator.validate(request)
        assert len(result.errors) == 1
        assert "i5" in result.errors[0]

    def test_index_constraint_needs_enough_indexes(self, make_pool):
        result = RequestValidator.validate(
            _request(make_pool(2, 2), constraint="index")
        )
        assert any("only once" in e for e in result.errors)

    def test_index_constraint_ignored_for_dual(self, make_pool):
        request = _request(
            make_pool(2, 2), pool_i5=make_pool(2, 2, IndexType.I5), constraint="index"
        )
        assert RequestValidator.validate(request).is_valid

    def test_unknown_chemistry_and_constraint(self, make_pool):
        result = RequestValidator.validate(
            _request(make_pool(3, 3), chemistry=3, constraint="pool")
        )
        assert len(result.errors) == 2

    def test_options_types_and_budgets(self, make_pool):
        result = RequestValidator.validate(
            _request(
                make_pool(3, 3),
                complete_lane="yes",
                select_comp_indexes=None,
                max_trials=0,
                workers=True,
            )
        )
        assert len(result.errors) == 4
