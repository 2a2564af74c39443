"""
Daygrid Backend - API Routes Package
======================================

Route Inventory:
    - auth.py:          /api/auth/*          sign-up, sign-in, refresh, sign-out, me
    - profile.py:       /api/profile, /api/profiles/{user_id}[/posts]
    - tasks.py:         /api/tasks
    - grid.py:          /api/grid
    - posts.py:         /api/posts/feed, /api/posts/{post_id}
    - interactions.py:  /api/posts/{post_id}/likes|comments, /api/comments/{id}
    - media.py:         /media/{path}
    - health.py:        /health

Routes stay thin: read the request, call a service, return its result.
Errors propagate to the handlers registered in daygrid.main.
"""
