"""
Tests for the dashboard screens: sell, inventory, products, catalogs, orders.
"""

PRODUCTS = "/rest/v1/products"
RPC = "/rest/v1/rpc/"


# --- auth ---

def test_login_sets_session_cookie(client, fake):
    fake.respond("POST", "/auth/v1/token", {"access_token": "tok-1", "expires_in": 3600})

    resp = client.post("/login", json={"email": "admin@depozit.mx", "password": "secret1"})

    assert resp.status_code == 200
    assert resp.json()["access_token"] == "tok-1"
    assert "depozit-access-token=tok-1" in resp.headers["set-cookie"]
    assert fake.calls("POST", "/auth/v1/token")[0].url.params["grant_type"] == "password"


def test_login_with_bad_credentials(client, fake):
    fake.respond("POST", "/auth/v1/token", {"error": "invalid_grant", "error_description": "bad"}, status=400)

    resp = client.post("/login", json={"email": "admin@depozit.mx", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid login credentials"}


def test_me_reports_role(client, as_employee):
    resp = client.get("/me")

    assert resp.json() == {"id": "emp-1", "email": "cajero@depozit.mx", "role": "employee"}


# --- dashboard ---

def test_employee_dashboard_and_nav(client, as_employee):
    home = client.get("/dashboard").json()
    assert home["view"] == "employee"
    assert home["sell_url"] == "/dashboard/sell"

    hrefs = [item["href"] for item in client.get("/dashboard/nav").json()]
    assert "/dashboard/sell" in hrefs
    assert "/dashboard/reports" not in hrefs
    assert "/dashboard/settings" not in hrefs


def test_admin_dashboard_survives_a_failed_block(client, fake):
    fake.respond("POST", RPC + "get_sales_summary",
                 {"total_sales": 1500, "total_profit": 500, "transaction_count": 7, "average_sale": 214.29})
    fake.fail("POST", RPC + "get_recent_sales")

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    body = resp.json()
    assert body["view"] == "admin"
    assert body["cards"][0]["value"] == "$1,500.00"
    assert body["recent_sales"] == []
    assert len(body["toasts"]) == 1


def test_global_search_needs_two_characters(client, fake):
    assert client.get("/dashboard/search", params={"q": "m"}).json() == []
    assert fake.calls("GET", PRODUCTS) == []

    fake.respond("GET", PRODUCTS, [{"id": "p1", "name": "Martillo", "sku": "MAR-1", "image_url": None}])
    resp = client.get("/dashboard/search", params={"q": "mar"})

    assert resp.json()[0]["name"] == "Martillo"
    params = fake.calls("GET", PRODUCTS)[0].url.params
    assert params["status"] == "eq.active"
    assert params["limit"] == "5"


# --- sell ---

def _stock(fake, stock=5):
    fake.respond("GET", PRODUCTS, [
        {"id": "p1", "name": "Martillo", "status": "active", "sale_price": 116.0, "cost_price": 70.0, "stock": stock},
    ])


def test_checkout_processes_sale(client, fake):
    _stock(fake)
    fake.respond("POST", RPC + "process_sale", "a1b2c3d4-0000-4000-8000-000000000000")

    resp = client.post("/dashboard/sell/checkout", json={
        "items": [{"product_id": "p1", "quantity": 1}, {"product_id": "p1", "quantity": 1}],
        "payment_method": "efectivo",
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Venta #a1b2c3d4 registrada con éxito."
    assert body["totals"] == {"total": 232.0, "subtotal": 200.0, "tax": 32.0, "total_quantity": 2}

    sale = fake.body(fake.calls("POST", RPC + "process_sale")[0])
    assert sale["p_cart_items"] == [{"product_id": "p1", "quantity": 2, "sale_price": 116.0, "cost_price": 70.0}]
    assert sale["p_total_amount"] == 232.0
    assert sale["p_payment_method"] == "efectivo"
    assert sale["p_customer_id"] is None


def test_checkout_rejects_quantity_above_stock(client, fake):
    _stock(fake, stock=1)

    resp = client.post("/dashboard/sell/checkout", json={
        "items": [{"product_id": "p1", "quantity": 2}], "payment_method": "tarjeta",
    })

    assert resp.status_code == 400
    assert fake.calls("POST", RPC + "process_sale") == []


def test_checkout_rejects_empty_cart_and_bad_payment(client, fake):
    assert client.post("/dashboard/sell/checkout", json={"items": [], "payment_method": "efectivo"}).status_code == 400

    resp = client.post("/dashboard/sell/checkout", json={
        "items": [{"product_id": "p1", "quantity": 1}], "payment_method": "bitcoin",
    })
    assert resp.status_code == 400
    assert "payment_method" in resp.json()["error"]
    assert fake.calls("POST", prefix=RPC) == []


def test_malformed_json_error_names_no_position(client, fake):
    resp = client.post(
        "/dashboard/sell/checkout", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "JSON decode error"


# --- inventory ---

def test_inventory_pages_by_twelve(client, fake):
    fake.respond("GET", PRODUCTS, [
        {"id": f"p{i}", "name": f"P{i}", "sku": f"S{i}", "stock": i, "image_url": None, "categories": None}
        for i in range(12)
    ])

    body = client.get("/dashboard/inventory", params={"page": 1}).json()

    params = fake.calls("GET", PRODUCTS)[0].url.params
    assert params["offset"] == "12"
    assert params["limit"] == "12"
    assert body["has_more"] is True
    assert body["items"][0]["stock_badge"] == "destructive"


def test_inventory_search_is_unpaged(client, fake):
    client.get("/dashboard/inventory", params={"q": "7501"})

    params = fake.calls("GET", PRODUCTS)[0].url.params
    assert "offset" not in params
    assert "barcode.eq.7501" in params["or"]


def test_stock_subtraction_cannot_exceed_stock(client, fake):
    _stock(fake, stock=3)

    resp = client.post("/dashboard/inventory/p1/adjust", json={"type": "subtraction", "quantity": 4, "reason": "Merma"})

    assert resp.status_code == 400
    assert fake.calls("POST", RPC + "handle_stock_adjustment") == []


def test_stock_addition(client, fake):
    _stock(fake, stock=3)

    resp = client.post("/dashboard/inventory/p1/adjust", json={"type": "addition", "quantity": 4, "reason": "Conteo"})

    assert resp.json()["new_stock"] == 7
    rpc = fake.body(fake.calls("POST", RPC + "handle_stock_adjustment")[0])
    assert rpc == {"p_product_id": "p1", "p_quantity_change": 4, "p_reason": "Conteo"}


# --- products ---

def test_product_create_removes_image_when_insert_fails(client, fake):
    fake.fail("POST", PRODUCTS, 'duplicate key value violates unique constraint "products_sku_key"', status=409)

    resp = client.post(
        "/dashboard/products",
        data={"name": "Martillo", "sku": "MAR-1", "sale_price": "116"},
        files={"image": ("martillo.png", b"\x89PNG", "image/png")},
    )

    assert resp.status_code == 400
    upload = fake.calls("POST", prefix="/storage/v1/object/product-images/public/")
    assert len(upload) == 1
    assert upload[0].url.path.endswith("-martillo.png")
    removed = fake.calls("DELETE", "/storage/v1/object/product-images")
    assert fake.body(removed[0])["prefixes"][0].startswith("public/")


def test_product_create_inserts_active_product(client, fake):
    fake.respond("POST", PRODUCTS, [{"id": "p9", "name": "Martillo"}])

    resp = client.post("/dashboard/products", data={"name": "Martillo", "sku": "MAR-1", "sale_price": "116"})

    assert resp.status_code == 200
    row = fake.body(fake.calls("POST", PRODUCTS)[0])[0]
    assert row["status"] == "active"
    assert row["image_url"] is None


def test_product_details_not_found(client, fake):
    fake.respond("POST", RPC + "get_product_details", {"product": None})

    assert client.get("/dashboard/products/p404/details").status_code == 404


def test_product_details_missing_row_is_not_found(client, fake):
    fake.fail("POST", RPC + "get_product_details", "JSON object requested, multiple (or no) rows returned", status=406)

    assert client.get("/dashboard/products/p404/details").status_code == 404


def test_product_details_backend_failure_is_not_a_404(client, fake):
    fake.fail("POST", RPC + "get_product_details", "canceling statement due to statement timeout", status=500)

    resp = client.get("/dashboard/products/p1/details")

    assert resp.status_code == 500
    assert resp.json() == {"error": "canceling statement due to statement timeout"}


# --- catalogs ---

def test_categories_list_their_products(client, fake):
    fake.respond("GET", "/rest/v1/categories", [
        {"id": "c1", "name": "Herramientas", "products": [{"id": "p1", "name": "Martillo", "sku": "MAR-1", "stock": 4}]},
        {"id": "c2", "name": "Pinturas", "products": []},
    ])

    resp = client.get("/dashboard/categories")

    assert resp.status_code == 200
    assert resp.json()[0]["products"] == [{"id": "p1", "name": "Martillo", "sku": "MAR-1", "stock": 4}]
    assert resp.json()[1]["products"] == []
    params = fake.calls("GET", "/rest/v1/categories")[0].url.params
    assert params["select"] == "id, name, products(id, name, sku, stock)"


def test_category_in_use_cannot_be_deleted(client, fake):
    fake.fail("DELETE", "/rest/v1/categories", "violates foreign key constraint", status=409, code="23503")

    resp = client.delete("/dashboard/categories/c1")

    assert resp.status_code == 409


def test_category_name_required(client, fake):
    assert client.post("/dashboard/categories", json={"name": "  "}).status_code == 400
    assert fake.calls("POST", "/rest/v1/categories") == []


def test_suppliers_are_admin_only(client, as_employee):
    assert client.get("/dashboard/suppliers").status_code == 403


# --- purchase orders ---

def test_purchase_order_create(client, fake):
    fake.respond("POST", RPC + "create_purchase_order", "po-1")

    resp = client.post("/dashboard/orders", json={
        "supplier_id": "s1",
        "items": [{"product_id": "p1", "quantity": 3, "cost_price": 10.5}, {"product_id": "p2", "quantity": 1, "cost_price": 4}],
    })

    assert resp.status_code == 200
    assert resp.json()["total_amount"] == 35.5
    rpc = fake.body(fake.calls("POST", RPC + "create_purchase_order")[0])
    assert rpc["p_supplier_id"] == "s1"
    assert len(rpc["p_po_items"]) == 2


def test_purchase_order_rejects_duplicate_products(client, fake):
    resp = client.post("/dashboard/orders", json={
        "supplier_id": "s1",
        "items": [{"product_id": "p1", "quantity": 1, "cost_price": 1}, {"product_id": "p1", "quantity": 2, "cost_price": 1}],
    })

    assert resp.status_code == 400
    assert fake.calls("POST", prefix=RPC) == []


def test_purchase_order_not_found(client, fake):
    assert client.get("/dashboard/orders/missing").status_code == 404


# --- settings ---

def test_change_role(client, fake):
    resp = client.put("/dashboard/settings/users/u-2/role", json={"role": "admin"})

    assert resp.status_code == 200
    rpc = fake.body(fake.calls("POST", RPC + "update_user_role")[0])
    assert rpc == {"p_user_id": "u-2", "p_new_role": "admin"}


def test_change_role_rejects_unknown_role(client, fake):
    assert client.put("/dashboard/settings/users/u-2/role", json={"role": "owner"}).status_code == 400
