"""Tasks API: authenticated, per-user task management.

Users register, log in, and manage private to-do items. Every task
belongs to exactly one user; reads and writes are gated by ownership,
and listings use cursor (keyset) pagination.
"""

__version__ = "0.1.0"
