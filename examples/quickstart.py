#!/usr/bin/env python3
"""
tasksapi Quickstart — full task lifecycle in one script.

Registers a user → creates tasks → reads → completes → lists → deletes.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:3000
"""

import uuid

from _common import create_client


def main():
    client = create_client()

    # ── Create ────────────────────────────────────────────────────
    print("\n1. Creating tasks...")
    created = []
    for title, description in [
        ("Buy groceries", "Milk, eggs, bread"),
        ("Write report", "Quarterly numbers, important"),
        ("Call the plumber", None),
    ]:
        body = {"title": title}
        if description:
            body["description"] = description
        resp = client.post("/tasks", json=body)
        assert resp.status_code == 201, f"Failed: {resp.text}"
        task = resp.json()
        created.append(task)
        print(f"   {task['id'][:8]}...  {task['title']}")

    # ── Read ──────────────────────────────────────────────────────
    print("\n2. Reading one back...")
    task = client.get(f"/tasks/{created[0]['id']}").json()
    print(f"   {task['title']}: {task['description']!r} (completed={task['completed']})")

    # ── Update ────────────────────────────────────────────────────
    print("\n3. Completing it...")
    resp = client.put(f"/tasks/{task['id']}", json={"completed": True})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   completed={resp.json()['completed']}  updatedAt={resp.json()['updatedAt']}")

    # ── List + filter ─────────────────────────────────────────────
    print("\n4. Open tasks, newest first:")
    page = client.get("/tasks", params={"completed": "false"}).json()
    for t in page["data"]:
        print(f"   - {t['title']}")

    print("\n5. Searching for 'important':")
    page = client.get("/tasks", params={"search": "important"}).json()
    for t in page["data"]:
        print(f"   - {t['title']}: {t['description']}")

    # ── Errors ────────────────────────────────────────────────────
    print("\n6. What errors look like:")
    for path in ("/tasks/not-a-uuid", f"/tasks/{uuid.uuid4()}"):
        resp = client.get(path)
        print(f"   GET {path[:20]:<20} → {resp.status_code} {resp.json()['message']}")

    # ── Delete ────────────────────────────────────────────────────
    print("\n7. Deleting everything...")
    for t in created:
        resp = client.delete(f"/tasks/{t['id']}")
        assert resp.status_code == 204, f"Failed: {resp.text}"
    remaining = client.get("/tasks").json()["data"]
    print(f"   {len(remaining)} tasks left")

    client.post("/users/logout")
    print("\n✓ Done.")


if __name__ == "__main__":
    main()
