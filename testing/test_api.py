"""
Quick API smoke test against a running LocShare server.
Tests: register, login, send location, list locations, list users.
"""

import os

import requests

BASE = os.getenv("LOCSHARE_URL", "http://localhost:3000")

# 1) Register a user
r = requests.post(f"{BASE}/register", json={
    "username": "smoke",
    "email": "smoke@example.com",
    "password": "pass123"
})
print("REGISTER:", r.status_code, r.json())

# 2) Login with same credentials
r = requests.post(f"{BASE}/login", json={
    "email": "smoke@example.com",
    "password": "pass123"
})
print("LOGIN:", r.status_code, r.json())
token = r.json().get("token")
headers = {"Authorization": f"Bearer {token}"}

# 3) Who am I
r = requests.get(f"{BASE}/me", headers=headers)
print("ME:", r.status_code, r.json())

# 4) Send a location
r = requests.post(f"{BASE}/send-location", json={
    "latitude": 37.77,
    "longitude": -122.41
})
print("SEND LOCATION:", r.status_code, r.json())

# 5) List recent locations (token is ignored unless PROTECT_LOCATIONS is set)
r = requests.get(f"{BASE}/locations", headers=headers)
print("LIST LOCATIONS:", r.status_code, r.json())

# 6) List users
r = requests.get(f"{BASE}/users")
print("LIST USERS:", r.status_code, r.json())
