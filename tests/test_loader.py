#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

from decimal import Decimal

import pytest
import yaml

from fleet import (
    ExpenseRecord,
    ServiceRecord,
    ServiceStatus,
    Vehicle,
    VehicleStatus,
    add_expense,
    add_service,
    add_vehicle,
    create_tables,
    delete_expense,
    delete_service,
    delete_vehicle,
    load_expenses,
    load_services,
    load_settings,
    load_vehicles,
    replace_service_with_installments,
    split_into_installments,
    update_expense,
    update_service,
    update_vehicle,
)

SERVICES_YAML = """
services:
  - id: 1
    client: Construtora Alfa
    plate: aaa1111
    grossAmount: 1500.50
    issueDate: 2024-01-05
    dueDate: '2024-02-05'
    status: Pendente
    orderNumber: '1042'
    boleto: 23790001
  - id: 2
    client: Porto Beta
    plate: AAA1111
    grossAmount: 800
    issueDate: '2024-01-10'
    paymentDate: '2024-01-12'
    status: Pago
"""


# =============================================================================
# Loading
# =============================================================================


class TestLoadTables:
    """Tests for load_vehicles, load_services and load_expenses."""

    def test_loads_vehicles(self, tmp_path):
        path = tmp_path / "vehicles.yaml"
        path.write_text("""
vehicles:
  - plate: aaa1111
    model: Munck 45t
    year: 2019
    status: Manutenção
  - plate: BBB2222
""")
        vehicles = load_vehicles(path)
        assert len(vehicles) == 2
        assert isinstance(vehicles[0], Vehicle)
        assert vehicles[0].plate == "AAA1111"
        assert vehicles[0].year == 2019
        assert vehicles[0].status == VehicleStatus.MAINTENANCE
        assert vehicles[1].status == VehicleStatus.ACTIVE

    def test_loads_services(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text(SERVICES_YAML)
        services = load_services(path)
        assert all(isinstance(s, ServiceRecord) for s in services)
        first, second = services
        assert first.plate == "AAA1111"
        assert first.gross_amount == Decimal("1500.50")
        assert first.issue_date == "2024-01-05"  # unquoted YAML date
        assert first.due_date == "2024-02-05"
        assert first.payment_date is None
        assert first.status == ServiceStatus.PENDING
        assert first.order_number == "1042"
        assert first.boleto == "23790001"
        assert second.boleto is None
        assert second.gross_amount == Decimal("800")
        assert second.status == ServiceStatus.PAID

    def test_loads_expenses(self, tmp_path):
        path = tmp_path / "expenses.yaml"
        path.write_text("""
expenses:
  - id: 7
    vendor: Posto Sul
    description: Diesel
    plate: AAA1111
    totalAmount: 350.25
    issueDate: '2024-01-05'
""")
        expenses = load_expenses(path)
        assert isinstance(expenses[0], ExpenseRecord)
        assert expenses[0].id == 7
        assert expenses[0].total_amount == Decimal("350.25")

    def test_empty_table(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text("services: []\n")
        assert load_services(path) == []

    def test_unknown_status_raises(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text("""
services:
  - id: 1
    plate: AAA1111
    grossAmount: 10
    status: a Vencer
""")
        with pytest.raises(ValueError):
            load_services(path)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_when_missing(self, tmp_path):
        settings = load_settings(tmp_path / "settings.yaml")
        assert settings.commission_rate == Decimal("0.01")
        assert settings.timezone is None

    def test_reads_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("commissionRate: 0.025\ntimezone: America/Sao_Paulo\n")
        settings = load_settings(path)
        assert settings.commission_rate == Decimal("0.025")
        assert settings.timezone == "America/Sao_Paulo"


# =============================================================================
# Vehicles
# =============================================================================


class TestVehicleWrites:
    """Tests for add_vehicle, update_vehicle and delete_vehicle."""

    @pytest.fixture
    def path(self, tmp_path):
        path = tmp_path / "vehicles.yaml"
        path.write_text("vehicles:\n  - plate: AAA1111\n    model: Munck 45t\n")
        return path

    def test_add(self, path):
        add_vehicle(path, Vehicle("bbb2222", "Guindauto", 2021))
        data = yaml.safe_load(path.read_text())
        assert data["vehicles"][1] == {
            "plate": "BBB2222",
            "model": "Guindauto",
            "year": 2021,
            "status": "Ativo",
        }

    def test_add_duplicate_plate(self, path):
        with pytest.raises(ValueError):
            add_vehicle(path, Vehicle("aaa1111"))

    def test_update(self, path):
        update_vehicle(path, "aaa1111", Vehicle("AAA1111", "Munck 50t", status=VehicleStatus.INACTIVE))
        vehicle = load_vehicles(path)[0]
        assert vehicle.model == "Munck 50t"
        assert vehicle.status == VehicleStatus.INACTIVE

    def test_delete(self, path):
        delete_vehicle(path, "AAA1111")
        assert load_vehicles(path) == []

    def test_delete_unknown(self, path):
        with pytest.raises(KeyError):
            delete_vehicle(path, "ZZZ9999")


# =============================================================================
# Services
# =============================================================================


class TestServiceWrites:
    """Tests for service add/update/delete and installment replacement."""

    @pytest.fixture
    def path(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text(SERVICES_YAML)
        return path

    def test_add_assigns_next_id(self, path):
        service = ServiceRecord(None, "Usina Gama", "CCC3333", Decimal("99.90"), "2024-01-15")
        assert add_service(path, service) == 3
        added = load_services(path)[2]
        assert added.id == 3
        assert added.gross_amount == Decimal("99.9")

    def test_add_to_empty_file(self, tmp_path):
        path = tmp_path / "services.yaml"
        path.write_text("services:\n")
        assert add_service(path, ServiceRecord(None, "X", "AAA1111", 1, "2024-01-01")) == 1

    def test_omits_none_values(self, path):
        add_service(path, ServiceRecord(None, "Usina Gama", "CCC3333", 10, "2024-01-15"))
        row = yaml.safe_load(path.read_text())["services"][2]
        assert "dueDate" not in row
        assert "note" not in row
        assert row["status"] == "Pendente"

    def test_update(self, path):
        service = load_services(path)[0]
        service.status = ServiceStatus.PAID
        service.payment_date = "2024-02-01"
        update_service(path, service)
        reloaded = load_services(path)[0]
        assert reloaded.status == ServiceStatus.PAID
        assert reloaded.payment_date == "2024-02-01"

    def test_update_unknown_id(self, path):
        with pytest.raises(KeyError):
            update_service(path, ServiceRecord(99, "X", "AAA1111", 1, None))

    def test_delete(self, path):
        delete_service(path, 1)
        assert [s.id for s in load_services(path)] == [2]

    def test_replace_with_installments(self, path):
        original = load_services(path)[0]
        parts = split_into_installments(original, 2)
        ids = replace_service_with_installments(path, 1, parts)
        assert ids == [3, 4]
        services = load_services(path)
        assert [s.id for s in services] == [2, 3, 4]
        assert sum(s.gross_amount for s in services if s.id in ids) == Decimal("1500.50")

    def test_replace_never_reuses_removed_id(self, path):
        original = load_services(path)[1]
        original.due_date = "2024-02-10"
        ids = replace_service_with_installments(path, 2, split_into_installments(original, 2))
        assert ids == [3, 4]


# =============================================================================
# Expenses
# =============================================================================


class TestExpenseWrites:
    """Tests for expense add/update/delete."""

    @pytest.fixture
    def path(self, tmp_path):
        path = tmp_path / "expenses.yaml"
        path.write_text("expenses: []\n")
        return path

    def test_add_update_delete(self, path):
        expense = ExpenseRecord(None, "Posto Sul", "Diesel", "AAA1111", "350.25", "2024-01-05")
        expense_id = add_expense(path, expense)
        assert expense_id == 1

        stored = load_expenses(path)[0]
        stored.total_amount = Decimal("400")
        update_expense(path, stored)
        assert load_expenses(path)[0].total_amount == Decimal("400")

        delete_expense(path, expense_id)
        assert load_expenses(path) == []


class TestCreateTables:
    """Tests for create_tables."""

    def test_creates_empty_tables(self, tmp_path):
        data_dir = tmp_path / "data"
        create_tables(data_dir)
        assert load_vehicles(data_dir / "vehicles.yaml") == []
        assert load_services(data_dir / "services.yaml") == []
        assert load_expenses(data_dir / "expenses.yaml") == []
        assert not (data_dir / "settings.yaml").exists()

    def test_keeps_existing_tables(self, tmp_path):
        (tmp_path / "services.yaml").write_text(SERVICES_YAML)
        create_tables(tmp_path, Decimal("0.02"))
        assert len(load_services(tmp_path / "services.yaml")) == 2
        assert load_settings(tmp_path / "settings.yaml").commission_rate == Decimal("0.02")
