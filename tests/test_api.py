"""HTTP surface: status codes, payloads and report downloads."""
from io import BytesIO
from unittest import mock

import openpyxl
import pytest
from sqlalchemy.exc import OperationalError


@pytest.fixture
def category_id(client):
    response = client.post("/api/categories", json={"name": "Peripherals"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def create_product(client, category_id):
    def _create(sku, name, stock, price="19.99"):
        response = client.post("/api/products", json={
            "sku": sku,
            "name": name,
            "price": price,
            "cost_price": "10.00",
            "stock": stock,
            "category_id": category_id,
        })
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def _sell(client, product_id, quantity, **extra):
    return client.post(f"/api/inventory/products/{product_id}/sell", json={"quantity": quantity, **extra})


def _restock(client, product_id, quantity, **extra):
    return client.post(f"/api/inventory/products/{product_id}/restock", json={"quantity": quantity, **extra})


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "connected"


class TestCatalogEndpoints:
    def test_create_and_fetch_product(self, client, create_product):
        created = create_product("LAP-1", "Laptop", 4, price="1299.90")

        fetched = client.get(f"/api/products/{created['id']}").json()
        assert fetched["sku"] == "LAP-1"
        assert fetched["stock"] == 4
        assert client.get(f"/api/products/{created['id']}/stock").json() == {
            "product_id": created["id"], "stock": 4,
        }

    def test_duplicate_sku_conflicts(self, client, create_product, category_id):
        create_product("LAP-1", "Laptop", 4)

        response = client.post("/api/products", json={
            "sku": "LAP-1", "name": "Other", "price": "1.00", "cost_price": "1.00",
            "stock": 0, "category_id": category_id,
        })

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "DUPLICATE_SKU"

    def test_negative_initial_stock_is_rejected(self, client, category_id):
        response = client.post("/api/products", json={
            "sku": "NEG-1", "name": "Neg", "price": "1.00", "cost_price": "1.00",
            "stock": -1, "category_id": category_id,
        })

        assert response.status_code == 422

    def test_unknown_product_is_404(self, client):
        assert client.get("/api/products/999").status_code == 404
        assert client.get("/api/products/999/stock").status_code == 404

    def test_list_is_ordered_by_id(self, client, create_product):
        ids = [create_product(f"SKU-{n}", f"Item {n}", n)["id"] for n in range(3)]

        assert [p["id"] for p in client.get("/api/products").json()] == ids

    def test_low_stock_alerts(self, client, create_product):
        empty = create_product("OUT-1", "Empty", 0)
        low = create_product("LOW-1", "Low", 2)
        create_product("OK-1", "Plenty", 50)

        body = client.get("/api/products/low-stock").json()

        assert body["threshold"] == 5
        assert [a["product_id"] for a in body["alerts"]] == [empty["id"], low["id"]]
        assert body["critical_count"] == 1
        assert body["low_count"] == 1
        assert client.get("/api/products/low-stock", params={"threshold": 0}).json()["alerts"] == []

    def test_providers(self, client):
        response = client.post("/api/providers", json={"name": "Acme", "email": "sales@acme.test"})

        assert response.status_code == 201
        assert [p["name"] for p in client.get("/api/providers").json()] == ["Acme"]


class TestMovementEndpoints:
    def test_sell_and_restock(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 10)

        sold = _sell(client, product["id"], 4, note="order#1")
        assert sold.status_code == 200
        assert sold.json()["new_stock"] == 6
        assert sold.json()["movement"]["movement_type"] == "SALE"

        restocked = _restock(client, product["id"], 20, note="supplier X")
        assert restocked.status_code == 200
        assert restocked.json()["new_stock"] == 26

        recent = client.get("/api/inventory/movements/recent", params={"limit": 1}).json()
        assert len(recent) == 1
        assert recent[0]["movement_type"] == "RESTOCK"
        assert recent[0]["notes"] == "supplier X"

    def test_insufficient_stock_is_a_conflict(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 3)

        response = _sell(client, product["id"], 5)

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error"] == "INSUFFICIENT_STOCK"
        assert detail["current_stock"] == 3
        assert detail["shortfall"] == 2
        assert client.get(f"/api/products/{product['id']}/stock").json()["stock"] == 3
        assert client.get("/api/inventory/movements/recent").json() == []

    def test_unknown_product(self, client):
        response = _sell(client, 999, 1)

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "PRODUCT_NOT_FOUND"

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity(self, client, create_product, quantity):
        product = create_product("SKU-1", "Mouse", 3)

        assert _restock(client, product["id"], quantity).status_code == 400
        assert _sell(client, product["id"], quantity).status_code == 400

    def test_non_integer_quantity_is_rejected(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 3)

        assert _sell(client, product["id"], "2").status_code == 422

    def test_operation_id_retry_applies_once(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 10)

        first = _sell(client, product["id"], 2, operation_id="pos-77")
        retry = _sell(client, product["id"], 2, operation_id="pos-77")

        assert retry.json()["movement"]["id"] == first.json()["movement"]["id"]
        assert retry.json()["new_stock"] == 8

    def test_operation_id_reused_on_another_product_conflicts(self, client, create_product):
        first = create_product("SKU-1", "Mouse", 10)
        second = create_product("SKU-2", "Pad", 10)
        _sell(client, first["id"], 4, operation_id="pos-1")

        response = _sell(client, second["id"], 7, operation_id="pos-1")

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "OPERATION_CONFLICT"
        assert client.get(f"/api/products/{second['id']}/stock").json()["stock"] == 10

    def test_storage_failure_is_a_503(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 10)
        engine = client.app.state.inventory_engine
        boom = OperationalError("INSERT INTO stock_movements", {}, Exception("disk I/O error"))

        with mock.patch.object(engine.ledger, "append", side_effect=boom):
            response = _sell(client, product["id"], 2)

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["error"] == "PERSISTENCE_FAILURE"
        assert "check recent movements before retrying" in detail["message"]
        assert client.get(f"/api/products/{product['id']}/stock").json()["stock"] == 10

    def test_oversized_values_are_refused_cleanly(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 10)

        assert _restock(client, product["id"], 10**20).status_code == 400
        assert _sell(client, 10**20, 1).status_code == 404
        assert client.get(f"/api/products/{10**20}").status_code == 404

    def test_product_history(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 10)
        other = create_product("SKU-2", "Pad", 10)
        _sell(client, product["id"], 1)
        _sell(client, other["id"], 1)
        _restock(client, product["id"], 5)

        history = client.get(f"/api/inventory/products/{product['id']}/movements").json()

        assert [m["movement_type"] for m in history] == ["RESTOCK", "SALE"]
        assert client.get("/api/inventory/products/999/movements").status_code == 404


class TestReports:
    def test_best_sellers(self, client, create_product):
        mouse = create_product("SKU-1", "Mouse", 50)
        cable = create_product("SKU-2", "Cable", 50)
        _sell(client, mouse["id"], 3)
        _sell(client, cable["id"], 7)

        body = client.get("/api/reports/best-sellers").json()

        assert body == [
            {"rank": 1, "product_name": "Cable", "quantity_sold": 7},
            {"rank": 2, "product_name": "Mouse", "quantity_sold": 3},
        ]

    def test_best_sellers_empty(self, client):
        assert client.get("/api/reports/best-sellers").json() == []

    def test_inventory_csv(self, client, create_product):
        create_product("SKU-1", "Mouse; wireless", 5)

        response = client.get("/api/reports/inventory.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0].startswith("ID;SKU;NAME")
        assert '"Mouse; wireless"' in lines[1]

    def test_movements_csv(self, client, create_product):
        product = create_product("SKU-1", "Mouse", 5)
        _sell(client, product["id"], 2, note="order#1")

        lines = client.get("/api/reports/movements.csv").text.splitlines()

        assert len(lines) == 2
        assert ";SALE;2;" in lines[1]

    def test_pdf_reports(self, client, create_product):
        create_product("SKU-1", "Mouse", 1)

        for path in ("/api/reports/stock.pdf", "/api/reports/best-sellers.pdf"):
            response = client.get(path)
            assert response.status_code == 200
            assert response.headers["content-type"] == "application/pdf"
            assert response.content.startswith(b"%PDF")


class TestImportEndpoint:
    def _upload(self, client, rows, filename="catalog.xlsx"):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(["Name", "Description", "SKU", "Price", "Cost", "Stock", "Category", "Provider"])
        for row in rows:
            sheet.append(row)
        buffer = BytesIO()
        workbook.save(buffer)
        return client.post(
            "/api/products/import",
            files={"file": (filename, buffer.getvalue(),
                            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        )

    def test_import_reports_counts(self, client, category_id):
        response = self._upload(client, [
            ("Mouse", None, "MOU-1", 25, 12, 30, category_id, None),
            ("Broken", None, "BRK-1", "n/a", 12, 30, category_id, None),
        ])

        assert response.status_code == 200
        body = response.json()
        assert body["imported"] == 1
        assert body["skipped"] == 1
        assert body["errors"][0]["row"] == 3
        assert client.get("/api/inventory/movements/recent").json() == []

    def test_wrong_extension(self, client):
        response = client.post("/api/products/import", files={"file": ("catalog.csv", b"a;b", "text/csv")})

        assert response.status_code == 400

    def test_unreadable_workbook(self, client):
        response = client.post(
            "/api/products/import", files={"file": ("catalog.xlsx", b"not a zip", "application/octet-stream")}
        )

        assert response.status_code == 400
