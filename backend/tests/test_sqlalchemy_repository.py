# Overview: Durable repository behaviour against SQLite.

import pytest
from sqlalchemy.exc import OperationalError

from conftest import order_payload
from repairtrack.errors import (
    DuplicateSerialError,
    InvalidStateError,
    RepositoryUnavailableError,
    ValidationError,
)
from repairtrack.models import Order
from repairtrack.repositories import SqlAlchemyOrderRepository
from repairtrack.services import concurrency
from repairtrack.services.lifecycle_service import OrderLifecycleManager
from repairtrack.services.order_service import OrderIntakeService
from repairtrack.services.pipeline import Pipeline, SINGLE_SITE_STAGES


@pytest.fixture
def sql_intake(sql_repo, pipeline):
    return OrderIntakeService(sql_repo, pipeline)


@pytest.fixture
def sql_manager(sql_repo, pipeline):
    return OrderLifecycleManager(sql_repo, pipeline)


class TestOrders:
    def test_create_and_reload(self, sql_repo, sql_intake, store_a, db_session):
        heel = sql_repo.add_complaint("Heel Replacement", 450)
        order = sql_intake.create_order(store_a.id, order_payload(complaint_ids=[heel.id]))

        db_session.expire_all()
        reloaded = sql_repo.get_order(order.id)
        assert reloaded.serial_number == "LW01"
        assert reloaded.total_price == 450
        assert [c.description for c in reloaded.complaints] == ["Heel Replacement"]

    def test_get_orders_newest_first_and_scoped(self, sql_intake, sql_repo, store_a, store_b):
        first = sql_intake.create_order(store_a.id, order_payload())
        second = sql_intake.create_order(store_a.id, order_payload())
        other = sql_intake.create_order(store_b.id, order_payload())

        ids = [o.id for o in sql_repo.get_orders(store_a.id)]
        assert set(ids) == {first.id, second.id}
        assert other.id not in ids
        assert len(sql_repo.get_orders()) == 3

    def test_duplicate_serial_in_same_store(self, sql_intake, store_a):
        sql_intake.create_order(store_a.id, order_payload(serial_number="LW07"))
        with pytest.raises(DuplicateSerialError):
            sql_intake.create_order(store_a.id, order_payload(serial_number="LW07"))

    def test_same_serial_allowed_across_stores(self, sql_intake, store_a, store_b):
        a = sql_intake.create_order(store_a.id, order_payload())
        b = sql_intake.create_order(store_b.id, order_payload())
        assert a.serial_number == b.serial_number == "LW01"

    def test_mutation_on_missing_order(self, sql_repo, db_session):
        with pytest.raises(InvalidStateError):
            sql_repo.update_status("missing", "shipped")

    def test_price_update_round_trip(self, sql_manager, sql_intake, sql_repo, store_a, db_session):
        order = sql_intake.create_order(store_a.id, order_payload(is_price_unknown=True))
        sql_manager.update_price(order.id, 375)

        db_session.expire_all()
        reloaded = sql_repo.get_order(order.id)
        assert reloaded.total_price == 375
        assert reloaded.is_price_unknown is False

    def test_bulk_status_reports_missing(self, sql_manager, sql_intake, store_a):
        order = sql_intake.create_order(store_a.id, order_payload())
        result = sql_manager.bulk_set_status([order.id, "missing"], "received")
        assert result.succeeded == [order.id]
        assert result.failed == ["missing"]

    def test_repository_bulk_update_status(self, sql_repo, sql_intake, store_a):
        order = sql_intake.create_order(store_a.id, order_payload())
        result = sql_repo.bulk_update_status([order.id, "missing"], "shipped")
        assert result.to_dict()["succeeded"] == [order.id]
        assert "missing" in result.errors

    def test_single_site_pipeline(self, sql_repo, store_a):
        pipeline = Pipeline(SINGLE_SITE_STAGES)
        intake = OrderIntakeService(sql_repo, pipeline)
        manager = OrderLifecycleManager(sql_repo, pipeline)
        order = intake.create_order(store_a.id, order_payload())
        assert manager.advance(order.id, "next").status == "received"
        manager.set_status(order.id, "departure")
        assert manager.advance(order.id, "next").status == "in_store"


class TestGroups:
    def test_group_expense_is_atomic_and_persisted(self, sql_manager, sql_intake, sql_repo, store_a, db_session):
        a = sql_intake.create_order(store_a.id, order_payload(total_price=200))
        b = sql_intake.create_order(store_a.id, order_payload(total_price=300))
        group = sql_manager.create_group("Courier batch", [a.id, b.id], store_id=store_a.id)

        sql_manager.add_group_expense(group.id, "Courier", 100)

        db_session.expire_all()
        assert sql_repo.get_order(a.id).total_price == 250
        assert sql_repo.get_order(b.id).total_price == 350
        reloaded = sql_repo.get_group(group.id)
        assert reloaded.to_dict()["total_expenses"] == 100
        assert {o.id for o in reloaded.orders} == {a.id, b.id}

    def test_get_groups_by_store(self, sql_manager, sql_intake, sql_repo, store_a, store_b):
        a = sql_intake.create_order(store_a.id, order_payload())
        sql_manager.create_group("A batch", [a.id])
        assert len(sql_repo.get_groups(store_a.id)) == 1
        assert sql_repo.get_groups(store_b.id) == []

    def test_missing_member_rolls_back(self, sql_manager, sql_intake, sql_repo, store_a, db_session):
        a = sql_intake.create_order(store_a.id, order_payload())
        with pytest.raises(InvalidStateError):
            sql_repo.create_group("Broken", [a.id, "missing"])
        db_session.expire_all()
        assert sql_repo.get_order(a.id).group_id is None
        assert sql_repo.get_groups() == []


class TestCatalogAndStores:
    def test_catalog_delete(self, sql_repo, db_session):
        entry = sql_repo.add_in_house_preset("Quick Polish", 80)
        assert [p.description for p in sql_repo.get_in_house_presets()] == ["Quick Polish"]
        assert sql_repo.delete_in_house_preset(entry.id) is True
        assert sql_repo.delete_in_house_preset(entry.id) is False

    def test_store_names_unique_case_insensitive(self, sql_repo, store_a):
        with pytest.raises(ValidationError):
            sql_repo.create_store("store a", "hash")


class TestRetry:
    def test_operational_error_becomes_repository_unavailable(self, db_session, monkeypatch):
        monkeypatch.setattr(concurrency.time, "sleep", lambda _: None)
        calls = []

        def failing():
            calls.append(1)
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(RepositoryUnavailableError):
            concurrency.run_with_retry(failing, attempts=3)
        assert len(calls) == 3

    def test_transient_error_recovers(self, db_session, monkeypatch):
        monkeypatch.setattr(concurrency.time, "sleep", lambda _: None)
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))
            return db_session.query(Order).count()

        assert concurrency.run_with_retry(flaky) == 0
        assert len(calls) == 2


class RecordingSession:
    def __init__(self):
        self.rollbacks = 0

    def rollback(self):
        self.rollbacks += 1


class TestInjectedSession:
    def test_retry_rolls_back_the_given_session(self, db_session, monkeypatch):
        monkeypatch.setattr(concurrency.time, "sleep", lambda _: None)
        session = RecordingSession()

        def failing():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(RepositoryUnavailableError):
            concurrency.run_with_retry(failing, attempts=2, session=session)
        assert session.rollbacks == 2

    def test_repository_uses_injected_session(self, db_session, store_a):
        repo = SqlAlchemyOrderRepository(session=db_session)
        assert [s.name for s in repo.get_stores()] == ["Store A"]


class TestGroupExpenseUnitOfWork:
    def test_share_added_to_latest_committed_total(self, sql_manager, sql_intake, sql_repo, store_a, db_session):
        a = sql_intake.create_order(store_a.id, order_payload(total_price=100))
        b = sql_intake.create_order(store_a.id, order_payload(total_price=100))
        group = sql_manager.create_group("Batch", [a.id, b.id])

        sql_manager.add_group_expense(group.id, "Courier 1", 100)
        sql_manager.update_price(a.id, 400)
        totals = sql_repo.add_group_expense(group.id, "Courier 2", 100)

        assert totals == {a.id: 450, b.id: 200}
        db_session.expire_all()
        assert len(sql_repo.get_group(group.id).expenses) == 2
        assert sql_repo.get_order(a.id).total_price == 450
        assert sql_repo.get_order(b.id).total_price == 200
