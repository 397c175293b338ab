"""
Shared helpers for tasksapi examples.

Handles the health check and authentication (register + login) so each
example can focus on its specific workflow. Works with either token
transport: in cookie mode httpx's cookie jar carries the session, in
bearer mode the token from the login body goes into the header.
"""

import sys
import uuid

import httpx

ROOT = "http://localhost:3000"
BASE = f"{ROOT}/api"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{ROOT}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {ROOT}")
        print("Start it with:  tasksapi serve --reload")
        sys.exit(1)

    checks = resp.json()["checks"]
    print("Backend health:")
    print(f"  Database: {checks['database']}")
    print(f"  Redis:    {checks['redis']}")

    if resp.json()["status"] != "ok":
        print("\nERROR: Database is not reachable. Start it with: docker compose up -d")
        sys.exit(1)


def create_client(name: str = "Demo User") -> httpx.Client:
    """Register a fresh user, log in, and return an authenticated Client.

    Uses a unique email per run so examples are idempotent.
    """
    check_backend()

    run_id = uuid.uuid4().hex[:8]
    email = f"demo-{run_id}@example.com"
    password = "demo-password-123"

    client = httpx.Client(base_url=BASE, timeout=10)

    resp = client.post(
        "/users/register",
        json={"name": f"{name} {run_id}", "email": email, "password": password},
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = client.post("/users/login", json={"email": email, "password": password})
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    token = resp.json().get("token")
    if token:
        client.headers["Authorization"] = f"Bearer {token}"
        print("  Auth:     ✓ (bearer)")
    else:
        print("  Auth:     ✓ (cookie)")
    return client
