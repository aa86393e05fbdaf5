"""
Tests for swap plan validation and application.
"""

from conftest import make_rental, make_scooter
from models.swap_plan import apply_swaps, validate_swaps

TODAY = '2024-05-20'


def _swap(rental, from_scooter, to_scooter):
    return {'rental': rental, 'from_scooter': from_scooter, 'to_scooter': to_scooter}


class TestValidateSwaps:
    """Tests for re-checking a plan against current data."""

    def test_valid_plan(self):
        scooters = [make_scooter(1), make_scooter(2)]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05')

        assert validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental], scooters, TODAY) == []

    def test_target_booked_since_plan_was_made(self):
        scooters = [make_scooter(1), make_scooter(2, plate='1ABC-102')]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05', customer_name='Chris')
        newcomer = make_rental(2, 2, '2024-06-04', '2024-06-06')

        errors = validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental, newcomer], scooters, TODAY)

        assert errors == ["Scooter 1ABC-102 is not available for Chris's rental dates"]

    def test_size_mismatch(self):
        scooters = [make_scooter(1), make_scooter(2, size='small')]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05')

        errors = validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental], scooters, TODAY)

        assert errors == ['Size mismatch: cannot move rental to different size scooter']

    def test_target_in_maintenance(self):
        scooters = [make_scooter(1), make_scooter(2, status='maintenance', plate='1ABC-102')]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05')

        errors = validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental], scooters, TODAY)

        assert errors == ['Scooter 1ABC-102 is in maintenance']

    def test_rental_missing_or_finished(self):
        scooters = [make_scooter(1), make_scooter(2)]
        finished = make_rental(1, 1, '2024-06-01', '2024-06-05', status='completed', customer_name='Dana')
        ghost = make_rental(99, 1, '2024-06-01', '2024-06-05')

        errors = validate_swaps(
            [_swap(finished, scooters[0], scooters[1]), _swap(ghost, scooters[0], scooters[1])],
            [finished], scooters, TODAY
        )

        assert errors == [
            "Dana's rental is no longer pending or active",
            'Rental 99 not found',
        ]

    def test_rental_already_moved(self):
        scooters = [make_scooter(1), make_scooter(2), make_scooter(3)]
        stale = make_rental(1, 1, '2024-06-01', '2024-06-05', customer_name='Eli')
        current = {**stale, 'scooter_id': 3}

        errors = validate_swaps([_swap(stale, scooters[0], scooters[1])], [current], scooters, TODAY)

        assert errors == ["Eli's rental is no longer on the expected scooter"]

    def test_pinned_rental_is_refused(self):
        scooters = [make_scooter(1), make_scooter(2)]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05', pinned=True, customer_name='Gus')

        errors = validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental], scooters, TODAY)

        assert errors == ["Gus's rental is pinned to its scooter"]

    def test_rental_in_progress_is_refused(self):
        scooters = [make_scooter(1), make_scooter(2)]
        rental = make_rental(1, 1, '2024-05-15', '2024-06-05', status='active', customer_name='Hana')

        errors = validate_swaps([_swap(rental, scooters[0], scooters[1])], [rental], scooters, TODAY)

        assert errors == ["Hana's rental is already in progress"]

    def test_pinned_after_plan_was_made(self):
        """The plan carries the old unpinned copy; the current data wins."""
        scooters = [make_scooter(1), make_scooter(2)]
        planned = make_rental(1, 1, '2024-06-01', '2024-06-05', customer_name='Ivo')
        current = {**planned, 'pinned': True}

        errors = validate_swaps([_swap(planned, scooters[0], scooters[1])], [current], scooters, TODAY)

        assert errors == ["Ivo's rental is pinned to its scooter"]

    def test_unknown_target(self):
        scooters = [make_scooter(1)]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05')

        errors = validate_swaps([_swap(rental, scooters[0], {'id': 42})], [rental], scooters, TODAY)

        assert errors == ['Target scooter 42 not found']

    def test_earlier_swaps_in_plan_count(self):
        """Two rentals moved onto the same scooter for overlapping dates."""
        scooters = [make_scooter(1), make_scooter(2), make_scooter(3)]
        first = make_rental(1, 1, '2024-06-01', '2024-06-05')
        second = make_rental(2, 2, '2024-06-03', '2024-06-04')

        errors = validate_swaps(
            [_swap(first, scooters[0], scooters[2]), _swap(second, scooters[1], scooters[2])],
            [first, second], scooters, TODAY
        )

        assert len(errors) == 1
        assert 'PLATE-3' in errors[0]

    def test_chain_of_swaps(self):
        """A rental may move onto a scooter vacated earlier in the same plan."""
        scooters = [make_scooter(1), make_scooter(2), make_scooter(3)]
        first = make_rental(1, 2, '2024-06-01', '2024-06-05')
        second = make_rental(2, 1, '2024-06-02', '2024-06-03')

        errors = validate_swaps(
            [_swap(first, scooters[1], scooters[2]), _swap(second, scooters[0], scooters[1])],
            [first, second], scooters, TODAY
        )

        assert errors == []


class TestApplySwaps:
    """Tests for applying swaps through an update function."""

    def test_all_swaps_applied(self):
        stored = {}

        def update(rental):
            stored[rental['id']] = rental
            return rental

        scooters = [make_scooter(1), make_scooter(2, plate='1ABC-102')]
        rental = make_rental(1, 1, '2024-06-01', '2024-06-05')

        result = apply_swaps([_swap(rental, scooters[0], scooters[1])], update)

        assert result['success'] is True
        assert result['errors'] == []
        assert stored[1]['scooter_id'] == 2
        assert stored[1]['scooter_license_plate'] == '1ABC-102'
        assert stored[1]['start_date'] == '2024-06-01'
        # The input plan is not mutated
        assert rental['scooter_id'] == 1

    def test_failures_are_collected(self):
        def update(rental):
            if rental['id'] == 1:
                raise ValueError('Rental not found')
            return rental

        scooters = [make_scooter(1), make_scooter(2), make_scooter(3)]
        failing = make_rental(1, 1, '2024-06-01', '2024-06-05', customer_name='Fay')
        working = make_rental(2, 2, '2024-06-10', '2024-06-12')

        result = apply_swaps(
            [_swap(failing, scooters[0], scooters[2]), _swap(working, scooters[1], scooters[2])],
            update
        )

        assert result['success'] is False
        assert [r['id'] for r in result['updated_rentals']] == [2]
        assert result['errors'] == ["Failed to move Fay's rental: Rental not found"]
