"""
Unit tests for line-item aggregation.
"""

import pytest
from pos_backend.exceptions import ValidationError, ErrorKind
from pos_backend.services.aggregation import aggregate_line_items


class TestAggregateLineItems:
    """Tests for aggregate_line_items."""

    def test_repeated_product_is_one_combined_demand(self):
        aggregated = aggregate_line_items([(7, 2), (7, 3)])

        assert aggregated.quantities == {7: 5}
        assert aggregated.product_ids == [7]
        assert len(aggregated) == 1

    def test_keeps_first_appearance_order(self):
        aggregated = aggregate_line_items([(9, 1), (3, 2), (9, 4), (5, 1)])

        assert aggregated.product_ids == [9, 3, 5]
        assert aggregated.quantities == {9: 5, 3: 2, 5: 1}
        assert aggregated.total_units == 8

    def test_accepts_numeric_strings(self):
        aggregated = aggregate_line_items([('4', '2'), (4, 1.0)])
        assert aggregated.quantities == {4: 3}

    @pytest.mark.parametrize('items', [
        [(0, 1)],
        [(None, 1)],
        [(1, 0)],
        [(1, -2)],
        [(1, 1.5)],
        [('abc', 1)],
        [(1, None)],
    ])
    def test_rejects_malformed_items(self, items):
        with pytest.raises(ValidationError) as exc_info:
            aggregate_line_items(items)
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.status_code == 400

    def test_rejects_empty_request(self):
        with pytest.raises(ValidationError):
            aggregate_line_items([])

    def test_one_bad_item_rejects_the_whole_request(self):
        with pytest.raises(ValidationError):
            aggregate_line_items([(1, 2), (2, 0), (3, 1)])
