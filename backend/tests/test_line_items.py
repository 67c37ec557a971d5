"""Line-item gateway: listing across associations, create/update partitioning."""

from dealcalc.core.security import create_deal_token


def _upsert(client, items, deal_id="777", token_deal=None):
    return client.post(
        "/api/line-items/upsert",
        json={"dealId": deal_id, "t": create_deal_token(token_deal or deal_id), "items": items},
    )


def test_list_line_items_reads_every_associated_item(client, fake_hubspot):
    fake_hubspot.line_item_ids = ["11", "12"]
    fake_hubspot.line_items = {
        "11": {"name": "Platform license", "price": "1200.00", "quantity": "2",
               "hs_line_item_currency_code": "USD", "hs_recurring_billing_period": "P12M"},
        "12": {"name": "Onboarding", "price": "499.5", "quantity": "1",
               "hs_discount_percentage": "10", "discount": ""},
    }
    r = client.get("/api/deals/777/line-items", params={"t": create_deal_token("777")})
    assert r.status_code == 200
    results = r.json()["results"]
    assert [i["id"] for i in results] == ["11", "12"]
    assert results[0]["price"] == 1200
    assert results[0]["quantity"] == 2
    assert results[0]["currency"] == "USD"
    assert results[0]["term"] == 12
    assert results[1]["price"] == 499.5
    assert results[1]["discountPercent"] == 10
    assert results[1]["discount"] is None
    [(ids, _props)] = fake_hubspot.calls_named("batch_read_line_items")
    assert ids == ["11", "12"]


def test_list_line_items_without_associations_skips_batch_read(client, fake_hubspot):
    r = client.get("/api/deals/777/line-items", params={"t": create_deal_token("777")})
    assert r.json() == {"results": []}
    assert fake_hubspot.calls_named("batch_read_line_items") == []


def test_list_line_items_with_token_for_other_deal_is_forbidden(client, fake_hubspot):
    r = client.get("/api/deals/777/line-items", params={"t": create_deal_token("778")})
    assert r.status_code == 403
    assert fake_hubspot.calls == []


def test_upsert_new_item_creates_once_and_associates_to_deal(client, fake_hubspot):
    r = _upsert(client, [{"name": "A", "qty": 2}])
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [i["name"] for i in body["created"]] == ["A"]
    assert body["created"][0]["quantity"] == 2
    assert body["updated"] == []
    assert fake_hubspot.calls_named("batch_create_line_items") == [("777", [{"name": "A", "quantity": 2}])]
    assert fake_hubspot.calls_named("batch_update_line_items") == []


def test_upsert_existing_item_updates_once_without_association(client, fake_hubspot):
    r = _upsert(client, [{"id": "123", "name": "A"}])
    assert r.status_code == 200
    body = r.json()
    assert body["created"] == []
    assert body["updated"][0]["id"] == "123"
    assert fake_hubspot.calls_named("batch_update_line_items") == [
        ([{"id": "123", "properties": {"name": "A"}}],)
    ]
    assert fake_hubspot.calls_named("batch_create_line_items") == []


def test_upsert_mixed_batch_issues_one_call_of_each_kind(client, fake_hubspot):
    items = [
        {"name": "New 1", "price": 10},
        {"id": 5, "name": "Old 1", "quantity": 3},
        {"name": "New 2", "price": 20, "currency": "EUR", "term": 24},
        {"id": "6", "discountPercent": 15},
    ]
    r = _upsert(client, items)
    assert r.status_code == 200
    [(deal_id, creates)] = fake_hubspot.calls_named("batch_create_line_items")
    [(updates,)] = fake_hubspot.calls_named("batch_update_line_items")
    assert deal_id == "777"
    assert creates == [
        {"name": "New 1", "price": 10},
        {"name": "New 2", "price": 20, "hs_line_item_currency_code": "EUR", "hs_recurring_billing_period": "P24M"},
    ]
    assert updates == [
        {"id": "5", "properties": {"name": "Old 1", "quantity": 3}},
        {"id": "6", "properties": {"hs_discount_percentage": 15}},
    ]
    assert len(r.json()["created"]) == 2
    assert len(r.json()["updated"]) == 2


def test_upsert_empty_batch_makes_no_upstream_calls(client, fake_hubspot):
    r = _upsert(client, [])
    assert r.json() == {"ok": True, "created": [], "updated": []}
    assert fake_hubspot.calls == []


def test_upsert_with_token_for_other_deal_is_forbidden(client, fake_hubspot):
    r = _upsert(client, [{"name": "A"}], deal_id="777", token_deal="999")
    assert r.status_code == 403
    assert r.json() == {"error": "Token/deal mismatch"}
    assert fake_hubspot.calls == []


def test_upsert_requires_deal_id(client, fake_hubspot):
    r = client.post("/api/line-items/upsert", json={"t": create_deal_token("777"), "items": []})
    assert r.status_code == 400
    assert r.json()["error"].startswith("dealId")


def test_upsert_requires_items_list(client, fake_hubspot):
    r = client.post(
        "/api/line-items/upsert",
        json={"dealId": "777", "t": create_deal_token("777"), "items": {"name": "A"}},
    )
    assert r.status_code == 400
    assert fake_hubspot.calls == []


def test_upsert_relays_upstream_failure(client, fake_hubspot, upstream_error):
    fake_hubspot.error = upstream_error(429, {"status": "error", "category": "RATE_LIMITS"})
    r = _upsert(client, [{"name": "A"}])
    assert r.status_code == 429
    assert r.json()["details"]["category"] == "RATE_LIMITS"


def test_upsert_partial_batch_failure_is_not_reported_as_ok(client, fake_hubspot, upstream_error):
    detail = {
        "results": [{"id": "9", "properties": {"name": "A"}}],
        "numErrors": 1,
        "errors": [{"category": "VALIDATION_ERROR", "message": "Property values were not valid"}],
    }
    fake_hubspot.error = upstream_error(207, detail)
    r = _upsert(client, [{"name": "A"}, {"name": "B"}])
    assert r.status_code == 207
    body = r.json()
    assert "ok" not in body
    assert body["details"]["numErrors"] == 1
