#!/usr/bin/env python3
"""
Cursor pagination walkthrough.

Creates a batch of tasks, then walks them page by page following
nextCursor until hasMore is false. Also shows that another user can't
see or touch them.

Run with: python examples/paginate.py
"""

from _common import create_client

PAGE_SIZE = 4


def main():
    alice = create_client("Alice")

    print("\nCreating 10 tasks...")
    ids = []
    for i in range(10):
        resp = alice.post("/tasks", json={"title": f"Task number {i:02d}"})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        ids.append(resp.json()["id"])

    for order in ("desc", "asc"):
        print(f"\nWalking createdAt {order}, {PAGE_SIZE} per page:")
        cursor = None
        page_no = 1
        while True:
            params = {"limit": PAGE_SIZE, "order": order}
            if cursor:
                params["cursor"] = cursor
            page = alice.get("/tasks", params=params).json()
            titles = ", ".join(t["title"][-2:] for t in page["data"])
            print(f"   page {page_no}: [{titles}]  hasMore={page['hasMore']}")
            if not page["hasMore"]:
                break
            cursor = page["nextCursor"]
            page_no += 1

    print("\nOwnership check with a second user:")
    bob = create_client("Bob")
    print(f"   Bob lists:  {len(bob.get('/tasks').json()['data'])} tasks")
    resp = bob.delete(f"/tasks/{ids[0]}")
    print(f"   Bob delete: {resp.status_code} {resp.json()['message']}")

    print("\n✓ Done.")


if __name__ == "__main__":
    main()
