"""Movement ledger: append, recent listing and the quantity ranking."""
import pytest

from techstore.exceptions import InvalidQuantity
from techstore.models import MovementType


def _append(db, ledger, product, movement_type, quantity, notes=None):
    movement = ledger.append(
        db, product_id=product.id, movement_type=movement_type, quantity=quantity, notes=notes
    )
    db.commit()
    return movement


class TestAppend:
    def test_append_assigns_id_and_timestamp(self, db, ledger, make_product):
        product = make_product()

        movement = _append(db, ledger, product, MovementType.SALE, 3, "walk-in customer")

        assert movement.id is not None
        assert movement.created_at is not None
        assert movement.movement_type == "SALE"
        assert movement.quantity == 3
        assert movement.notes == "walk-in customer"

    @pytest.mark.parametrize("quantity", [0, -4])
    def test_rejects_non_positive_magnitude(self, db, ledger, make_product, quantity):
        product = make_product()

        with pytest.raises(InvalidQuantity):
            ledger.append(db, product_id=product.id, movement_type=MovementType.RESTOCK, quantity=quantity)

        assert ledger.recent(db, 10) == []

    def test_ids_follow_write_order(self, db, ledger, make_product):
        product = make_product()

        ids = [_append(db, ledger, product, MovementType.RESTOCK, q).id for q in (1, 2, 3)]

        assert ids == sorted(ids)


class TestRecent:
    def test_most_recent_first_and_capped(self, db, ledger, make_product):
        product = make_product()
        for quantity in (1, 2, 3, 4):
            _append(db, ledger, product, MovementType.RESTOCK, quantity)

        recent = ledger.recent(db, 3)

        assert [m.quantity for m in recent] == [4, 3, 2]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_is_empty(self, db, ledger, make_product, limit):
        product = make_product()
        _append(db, ledger, product, MovementType.SALE, 1)

        assert ledger.recent(db, limit) == []

    def test_for_product_filters(self, db, ledger, make_product):
        first, second = make_product(), make_product()
        _append(db, ledger, first, MovementType.SALE, 1)
        _append(db, ledger, second, MovementType.SALE, 2)
        _append(db, ledger, first, MovementType.RESTOCK, 3)

        assert [m.quantity for m in ledger.for_product(db, first.id)] == [3, 1]


class TestTopByQuantity:
    def test_groups_sums_and_breaks_ties_by_first_seen(self, db, ledger, make_product):
        a = make_product(name="Alpha")
        b = make_product(name="Bravo")
        c = make_product(name="Charlie")
        d = make_product(name="Delta")

        # A:5, B:12 (split), C:3, D:12; B is seen before D
        _append(db, ledger, a, MovementType.SALE, 5)
        _append(db, ledger, b, MovementType.SALE, 7)
        _append(db, ledger, c, MovementType.SALE, 3)
        _append(db, ledger, d, MovementType.SALE, 12)
        _append(db, ledger, b, MovementType.SALE, 5)

        ranking = ledger.top_by_quantity(db, MovementType.SALE, 3)

        assert list(ranking.items()) == [("Bravo", 12), ("Delta", 12), ("Alpha", 5)]

    def test_only_counts_requested_type(self, db, ledger, make_product):
        product = make_product(name="Monitor")
        _append(db, ledger, product, MovementType.RESTOCK, 50)
        _append(db, ledger, product, MovementType.SALE, 2)

        assert ledger.top_by_quantity(db, MovementType.SALE, 3) == {"Monitor": 2}
        assert ledger.top_by_quantity(db, MovementType.RESTOCK, 3) == {"Monitor": 50}

    def test_products_sharing_a_name_are_one_group(self, db, ledger, make_product):
        first = make_product(name="USB Cable")
        second = make_product(name="USB Cable")
        _append(db, ledger, first, MovementType.SALE, 4)
        _append(db, ledger, second, MovementType.SALE, 6)

        assert ledger.top_by_quantity(db, MovementType.SALE, 3) == {"USB Cable": 10}

    def test_empty_ledger(self, db, ledger):
        assert ledger.top_by_quantity(db, MovementType.SALE, 3) == {}
