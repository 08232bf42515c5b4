from datetime import date
from decimal import Decimal

from models import Holding, Profile


def test_empty_portfolio(client):
    resp = client.get("/api/portfolio")
    assert resp.status_code == 200
    body = resp.json()
    assert body == {"success": True, "data": [], "count": 0}


def test_buy_then_list(client, make_stock, make_profile, add_price):
    s = make_stock("AAPL", "Apple Inc.")
    make_profile(balance=10000, init_invest=10000)
    add_price(s, 155.5, date(2024, 3, 1))

    resp = client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 10, "currentPrice": 150.25})
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["portfolio"]["volume"] == 10
    assert data["portfolio"]["averagePrice"] == 150.25
    assert data["profile"]["balance"] == 8497.5
    assert data["profile"]["holdings"] == 1502.5
    assert data["profile"]["netProfit"] == 0

    listing = client.get("/api/portfolio").json()
    assert listing["count"] == 1
    item = listing["data"][0]
    assert item["symbol"] == "AAPL"
    assert item["name"] == "Apple Inc."
    assert item["currentPrice"] == 155.5


def test_buy_requires_numeric_fields(client):
    resp = client.post("/api/portfolio/buy", json={"volume": 10, "currentPrice": 150.25})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "numeric stockId" in body["error"]

    resp = client.post("/api/portfolio/buy", json={"stockId": "invalid", "volume": 10, "currentPrice": 150.25})
    assert resp.status_code == 400
    assert "numeric" in resp.json()["error"]


def test_buy_unknown_stock_is_404(client, make_profile):
    make_profile()
    resp = client.post("/api/portfolio/buy", json={"stockId": 999, "volume": 10, "currentPrice": 150.25})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Stock not found"


def test_buy_insufficient_funds(client, make_stock, make_profile, db_session):
    s = make_stock()
    make_profile(balance=1000, init_invest=1000)
    resp = client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 10, "currentPrice": 150})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert db_session.query(Holding).count() == 0
    assert db_session.query(Profile).first().balance == Decimal('1000')


def test_sell_validation_messages(client):
    for payload in (
        {"stockId": "invalid", "volume": "10", "currentPrice": "150.25"},
        {"stockId": "1", "volume": "invalid", "currentPrice": "150.25"},
        {"stockId": "1", "volume": "0", "currentPrice": "150.25"},
        {"stockId": "1", "volume": "-10", "currentPrice": "150.25"},
        {"stockId": "1", "volume": "10", "currentPrice": "0"},
        {"stockId": "1", "volume": "10", "currentPrice": "-150.25"},
    ):
        resp = client.post("/api/portfolio/sell", json=payload)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid stockId, volume, or currentPrice"


def test_sell_unknown_holding_is_404(client, make_profile):
    make_profile()
    resp = client.post("/api/portfolio/sell", json={"stockId": "999", "volume": "10", "currentPrice": "150.25"})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Portfolio item not found"


def test_sell_exceeding_volume(client, make_stock, make_profile):
    s = make_stock()
    make_profile()
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 50, "currentPrice": 100})
    resp = client.post("/api/portfolio/sell", json={"stockId": str(s.id), "volume": "100", "currentPrice": "150.25"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Sell volume exceeds holding volume"


def test_sell_missing_initial_investment(client, make_stock, make_profile):
    s = make_stock()
    make_profile(init_invest=None)
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 20, "currentPrice": 100})
    resp = client.post("/api/portfolio/sell", json={"stockId": s.id, "volume": 10, "currentPrice": 150.25})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Initial investment is missing"


def test_partial_and_full_sell(client, make_stock, make_profile):
    s = make_stock()
    make_profile(balance=10000, init_invest=10000)
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 100, "currentPrice": 50})

    resp = client.post("/api/portfolio/sell", json={"stockId": str(s.id), "volume": "40", "currentPrice": "60"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Stock sold successfully"
    assert body["data"]["portfolio"]["volume"] == 60
    assert body["data"]["portfolio"]["averagePrice"] == 50
    assert body["data"]["profile"]["balance"] == 7400

    resp = client.post("/api/portfolio/sell", json={"stockId": s.id, "volume": 60, "currentPrice": 60})
    assert resp.status_code == 200
    assert resp.json()["data"]["portfolio"] is None
    assert client.get("/api/portfolio").json()["count"] == 0


def test_delete_item_closes_at_latest_price(client, make_stock, make_profile, add_price, db_session):
    s = make_stock()
    make_profile(balance=10000, init_invest=10000)
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 10, "currentPrice": 100})
    add_price(s, 130, date(2024, 2, 2))
    item_id = db_session.query(Holding).first().id

    resp = client.delete(f"/api/portfolio/{item_id}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Portfolio item deleted successfully"}
    db_session.expire_all()
    assert db_session.query(Holding).count() == 0
    assert db_session.query(Profile).first().balance == Decimal('10300')


def test_delete_unknown_item(client, make_profile):
    make_profile()
    resp = client.delete("/api/portfolio/12345")
    assert resp.status_code == 404


def test_delete_without_price_is_400(client, make_stock, make_profile, db_session):
    s = make_stock()
    make_profile()
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 1, "currentPrice": 10})
    item_id = db_session.query(Holding).first().id
    resp = client.delete(f"/api/portfolio/{item_id}")
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_transactions_listing(client, make_stock, make_profile):
    s = make_stock()
    make_profile()
    client.post("/api/portfolio/buy", json={"stockId": s.id, "volume": 5, "currentPrice": 10})
    client.post("/api/portfolio/sell", json={"stockId": s.id, "volume": 2, "currentPrice": 12})
    body = client.get("/api/portfolio/transactions").json()
    assert body["count"] == 2
    assert {t["action"] for t in body["data"]} == {"BUY", "SELL"}
    sell_row = next(t for t in body["data"] if t["action"] == "SELL")
    assert sell_row["amount"] == 24
