"""
Tests for scooter, rental and customer data access.
"""

import pytest

from models.customer import (
    create_customer,
    delete_customer,
    get_customer_by_id,
    get_customer_with_rentals,
    search_customers,
    update_customer,
)
from models.rental import (
    activate_rental,
    calculate_rental_statistics,
    check_rental_conflicts,
    complete_rental,
    create_rental,
    delete_rental,
    get_all_rentals,
    get_rental_by_id,
    update_rental,
)
from models.scooter import (
    create_scooter,
    delete_scooter,
    get_all_scooters,
    get_scooter_by_id,
    update_scooter,
)


class TestScooterModel:
    """Tests for scooter CRUD."""

    def test_create_and_get(self, app):
        scooter_id = create_scooter('1ABC-101', size='small', color='Black', year=2024)
        scooter = get_scooter_by_id(scooter_id)

        assert scooter['license_plate'] == '1ABC-101'
        assert scooter['size'] == 'small'
        assert scooter['status'] == 'available'

    def test_duplicate_plate(self, app):
        create_scooter('1ABC-101')
        with pytest.raises(ValueError):
            create_scooter('1ABC-101')

    def test_invalid_size_and_status(self, app):
        with pytest.raises(ValueError):
            create_scooter('1ABC-101', size='medium')
        with pytest.raises(ValueError):
            create_scooter('1ABC-101', status='rented')

    def test_filters(self, fleet):
        update_scooter(fleet['large_3'], status='maintenance')

        assert len(get_all_scooters()) == 4
        assert [s['id'] for s in get_all_scooters(size='small')] == [fleet['small_1']]
        assert fleet['large_3'] not in [s['id'] for s in get_all_scooters(include_maintenance=False)]

    def test_update_ignores_unknown_fields(self, fleet):
        assert update_scooter(fleet['large_1'], unknown='x') is False
        assert update_scooter(fleet['large_1'], color='Red', mileage=1500) is True
        assert get_scooter_by_id(fleet['large_1'])['color'] == 'Red'

    def test_delete_refuses_scooter_with_rentals(self, fleet):
        create_rental(fleet['large_1'], '2030-01-10', '2030-01-12', customer_name='Anna')

        with pytest.raises(ValueError):
            delete_scooter(fleet['large_1'])
        assert delete_scooter(fleet['large_2']) is True
        assert get_scooter_by_id(fleet['large_2']) is None


class TestRentalModel:
    """Tests for rental CRUD and lifecycle."""

    def test_create_future_rental_is_pending(self, fleet):
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')
        rental = get_rental_by_id(rental_id)

        assert rental['status'] == 'pending'
        assert rental['start_time'] == '09:00'
        assert rental['end_time'] == '18:00'
        assert rental['daily_rate'] == 1000
        assert rental['deposit'] == 2000
        assert rental['pinned'] is False
        assert rental['scooter_license_plate'] == '1ABC-101'
        assert len(rental['order_number']) == 9
        assert rental['order_number'].endswith('001')

    def test_rental_started_today_or_earlier_is_active(self, fleet):
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-12',
                                  customer_name='Anna', today='2030-01-10')
        assert get_rental_by_id(rental_id)['status'] == 'active'

    def test_order_numbers_increment(self, fleet):
        first = create_rental(fleet['large_1'], '2030-01-10', '2030-01-12', customer_name='A')
        second = create_rental(fleet['large_2'], '2030-01-10', '2030-01-12', customer_name='B')

        first_number = get_rental_by_id(first)['order_number']
        second_number = get_rental_by_id(second)['order_number']
        assert int(second_number) == int(first_number) + 1

    def test_overlap_is_rejected(self, fleet):
        create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')

        with pytest.raises(ValueError, match='already booked'):
            create_rental(fleet['large_1'], '2030-01-14', '2030-01-20', customer_name='Ben')

    def test_same_day_handover_with_buffer(self, fleet):
        create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna', end_time='10:00')
        rental_id = create_rental(fleet['large_1'], '2030-01-15', '2030-01-18',
                                  customer_name='Ben', start_time='12:00')
        assert get_rental_by_id(rental_id)['customer_name'] == 'Ben'

    def test_completed_rentals_do_not_conflict(self, fleet):
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')
        activate_rental(rental_id)
        complete_rental(rental_id)

        assert check_rental_conflicts(fleet['large_1'], '2030-01-12', '2030-01-13') == []

    def test_maintenance_scooter_is_rejected(self, fleet):
        update_scooter(fleet['large_1'], status='maintenance')
        with pytest.raises(ValueError, match='maintenance'):
            create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')

    def test_invalid_input(self, fleet):
        with pytest.raises(ValueError):
            create_rental(fleet['large_1'], '2030-01-15', '2030-01-10', customer_name='Anna')
        with pytest.raises(ValueError):
            create_rental(fleet['large_1'], '2030-01-10', '2030-01-15')
        with pytest.raises(ValueError):
            create_rental(9999, '2030-01-10', '2030-01-15', customer_name='Anna')

    def test_customer_name_from_customer(self, fleet):
        customer_id = create_customer('Greta Svensson')
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_id=customer_id)
        assert get_rental_by_id(rental_id)['customer_name'] == 'Greta Svensson'

    def test_update_moves_rental(self, fleet):
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')
        rental = get_rental_by_id(rental_id)

        updated = update_rental({**rental, 'scooter_id': fleet['large_2'], 'scooter_license_plate': 'ignored'})

        assert updated['scooter_id'] == fleet['large_2']
        assert updated['scooter_license_plate'] == '1ABC-102'
        assert updated['order_number'] == rental['order_number']

    def test_update_missing_rental(self, app):
        with pytest.raises(ValueError, match='Rental not found'):
            update_rental({'id': 999, 'scooter_id': 1})

    def test_update_cannot_create_conflict(self, fleet):
        create_rental(fleet['large_2'], '2030-01-10', '2030-01-15', customer_name='Anna')
        rental_id = create_rental(fleet['large_1'], '2030-01-12', '2030-01-13', customer_name='Ben')

        with pytest.raises(ValueError):
            update_rental({'id': rental_id, 'scooter_id': fleet['large_2']})

    def test_lifecycle(self, fleet):
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')

        with pytest.raises(ValueError):
            complete_rental(rental_id)

        assert activate_rental(rental_id)['status'] == 'active'
        with pytest.raises(ValueError):
            activate_rental(rental_id)

        completed = complete_rental(rental_id, paid=True)
        assert completed['status'] == 'completed'
        assert completed['paid'] is True
        assert completed['completed_at'] is not None

    def test_filters_and_delete(self, fleet):
        first = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Anna')
        create_rental(fleet['large_2'], '2030-01-10', '2030-01-15', customer_name='Ben')
        activate_rental(first)

        assert [r['id'] for r in get_all_rentals(status='active')] == [first]
        assert len(get_all_rentals(scooter_id=fleet['large_2'])) == 1

        assert delete_rental(first) is True
        assert delete_rental(first) is False


class TestRentalStatistics:
    """Tests for dashboard statistics."""

    def test_statistics(self):
        rentals = [
            {'status': 'active', 'start_date': '2026-03-10', 'end_date': '2026-03-15',
             'daily_rate': 1000, 'paid': False},
            {'status': 'completed', 'start_date': '2026-03-01', 'end_date': '2026-03-05',
             'completed_at': '2026-03-04 10:00:00', 'daily_rate': 1200, 'paid': True},
            {'status': 'completed', 'start_date': '2026-03-01', 'end_date': '2026-03-03',
             'daily_rate': 1000, 'paid': False},
            {'status': 'pending', 'start_date': '2026-04-01', 'end_date': '2026-04-05',
             'daily_rate': 900, 'paid': True},
        ]

        stats = calculate_rental_statistics(rentals, '2026-03-20')

        assert stats == {
            'total_rentals': 4,
            'pending_rentals': 1,
            'active_rentals': 1,
            'completed_rentals': 2,
            'overdue_rentals': 1,
            'total_revenue': 3 * 1200 + 4 * 900,
            'unpaid_amount': 2 * 1000,
        }

    def test_empty(self):
        stats = calculate_rental_statistics([], '2026-03-20')
        assert stats['total_rentals'] == 0
        assert stats['total_revenue'] == 0


class TestCustomerModel:
    """Tests for customer CRUD."""

    def test_create_with_defaults(self, app):
        customer_id = create_customer('Hana Kim', whatsapp_number='812345678')
        customer = get_customer_by_id(customer_id)

        assert customer['name'] == 'Hana Kim'
        assert customer['whatsapp_country_code'] == '+66'

    def test_name_required(self, app):
        with pytest.raises(ValueError):
            create_customer('  ')

    def test_duplicate_passport(self, app):
        first = create_customer('Ian', passport_number='P123')
        second = create_customer('Jo', passport_number='P456')

        with pytest.raises(ValueError):
            create_customer('Ian Again', passport_number='P123')
        with pytest.raises(ValueError):
            update_customer(second, passport_number='P123')
        assert update_customer(first, passport_number='P123', notes='same passport') is True

    def test_search(self, app):
        create_customer('Kai Lee', email='kai@example.com')
        create_customer('Lena Ross')

        assert [c['name'] for c in search_customers('kai')] == ['Kai Lee']
        assert search_customers('nobody') == []

    def test_rental_history_and_delete_guard(self, fleet):
        customer_id = create_customer('Mia')
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_id=customer_id)

        history = get_customer_with_rentals(customer_id)
        assert [r['id'] for r in history['rentals']] == [rental_id]

        with pytest.raises(ValueError):
            delete_customer(customer_id)

        delete_rental(rental_id)
        assert delete_customer(customer_id) is True
        assert get_customer_with_rentals(customer_id) is None


class TestAvailabilityService:
    """Tests for the service that feeds stored data to the availability core."""

    def test_unknown_ids_are_reported(self, fleet):
        from blueprints.fleet.services.availability_service import validate_swap_plan

        result = validate_swap_plan([{'rental_id': 99, 'from_scooter_id': fleet['large_1'], 'to_scooter_id': 42}])

        assert result == {'valid': False, 'errors': ['Rental 99 not found']}

    def test_stale_plan_writes_nothing(self, fleet):
        from blueprints.fleet.services.availability_service import apply_swap_plan

        create_rental(fleet['large_2'], '2030-01-12', '2030-01-12', customer_name='Busy')
        rental_id = create_rental(fleet['large_1'], '2030-01-10', '2030-01-15', customer_name='Stuck')

        result = apply_swap_plan([{
            'rental_id': rental_id,
            'from_scooter_id': fleet['large_1'],
            'to_scooter_id': fleet['large_2'],
        }])

        assert result['validated'] is False
        assert result['success'] is False
        assert result['updated_rentals'] == []
        assert get_rental_by_id(rental_id)['scooter_id'] == fleet['large_1']

    def test_scan_unknown_scooter(self, app):
        from blueprints.fleet.services.availability_service import scan_scooter

        with pytest.raises(ValueError, match='Scooter not found'):
            scan_scooter(999, '2030-01-10', '2030-01-12')


class TestDatetimeHelpers:
    """Tests for configured-timezone helpers."""

    def test_timestamp_format(self, app):
        from datetime import datetime

        from utils.datetime_helpers import get_timestamp, get_timezone

        stamp = datetime.strptime(get_timestamp(), '%Y-%m-%d %H:%M:%S')
        assert stamp.year >= 2024
        assert str(get_timezone()) == 'Asia/Bangkok'
