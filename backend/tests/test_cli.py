# Overview: Flask CLI commands run through the test runner.

from conftest import order_payload
from repairtrack.services.context import intake_service


class TestSystemCommands:
    def test_init_seeds_complaints_once(self, app, db_session):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["system", "init"])
        assert first.exit_code == 0
        assert "Seeded 5 default complaints" in first.output

        second = runner.invoke(args=["system", "init"])
        assert "Seeded 0 default complaints" in second.output

    def test_pipeline(self, app):
        result = app.test_cli_runner().invoke(args=["system", "pipeline"])
        assert "submitted -> shipped" in result.output
        assert "ready stage: in_store" in result.output


class TestStoreCommands:
    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        created = runner.invoke(args=["stores", "create", "--name", "Harbour Road", "--password", "secret1"])
        assert created.exit_code == 0
        assert "Created store: Harbour Road" in created.output

        listed = runner.invoke(args=["stores", "list"])
        assert "Harbour Road" in listed.output

    def test_short_password_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["stores", "create", "--name", "Harbour Road", "--password", "x"])
        assert result.exit_code != 0
        assert "at least 6 characters" in result.output


class TestOrderCommands:
    def test_next_serial_and_list(self, app, store_a, notifications):
        intake_service().create_order(store_a.id, order_payload(total_price=300))
        runner = app.test_cli_runner()

        serial = runner.invoke(args=["orders", "next-serial", "--store-id", str(store_a.id)])
        assert serial.output.strip() == "LW02"

        listed = runner.invoke(args=["orders", "list", "--store-id", str(store_a.id)])
        assert "LW01\tsubmitted\tJohn Doe\tdue=300.00" in listed.output

        completed = runner.invoke(args=["orders", "list", "--completed"])
        assert "No orders found." in completed.output
