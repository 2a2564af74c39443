"""
Daygrid Backend
=================

API server for Daygrid: users keep a short list of daily tasks, fill a photo
grid with one picture per task, and publish the finished grid as a post that
others can like and comment on.

Layers:
    ┌─────────────────────────────────────┐
    │  routes/      HTTP only             │
    ├─────────────────────────────────────┤
    │  services/    rules + orchestration │
    ├─────────────────────────────────────┤
    │  models/ + schemas/                 │
    ├─────────────────────────────────────┤
    │  database.py  async sessions        │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
