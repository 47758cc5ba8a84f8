# fleetfuel/tests/test_integration_server.py
import threading
import time

import requests
import uvicorn
from fleetfuel.app import create_app
from fleetfuel.config import Settings

import pytest
pytestmark = pytest.mark.skip(reason="Skip live Uvicorn test; use TestClient-based flow instead.")

BASE = "http://127.0.0.1:8000"


def run_server():
    app = create_app(Settings(storage_backend="memory", log_level="WARNING"))
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="warning")


def test_live_server_flow():
    # Start server in a background thread
    t = threading.Thread(target=run_server, daemon=True)
    t.start()
    time.sleep(0.5)  # simple wait for server to start

    assert requests.get(f"{BASE}/health").json()["status"] == "healthy"

    vehicle = requests.post(f"{BASE}/vehicles", json={
        "projectId": "site-a", "vehicleName": "Tipper 1", "vehicleNumber": "KA-01-1111",
        "fuelType": "Diesel", "startDate": "2024-01-01",
    }).json()
    supplier = requests.post(f"{BASE}/suppliers", json={"projectId": "site-a", "supplierName": "Highway Fuels"}).json()

    entry = requests.post(f"{BASE}/fuel-entries", json={
        "vehicleId": vehicle["id"], "supplierId": supplier["id"], "date": "2024-03-01T09:30:00",
        "litres": 10, "openingKm": 1000,
    }).json()
    closed = requests.post(f"{BASE}/fuel-entries/{entry['id']}/close", json={"closingKm": 1450}).json()
    assert closed["mileage"] == 45.0
