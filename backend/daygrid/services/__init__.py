"""
Daygrid Backend - Services Layer
==================================

Business rules between the routes and the database. Every service is a
stateless class with a module-level singleton (`task_service`, ...).

Service Inventory:
    - AuthService:    sign-up, sign-in, token refresh
    - ProfileService: profile views, edits, avatar upload, account deletion
    - TaskService:    the ordered daily task list
    - GridService:    photo cells and publishing the grid
    - PostService:    posts, profile sections, public feed
    - LikeService:    likes and like counts
    - CommentService: comment threads
    - FileService:    upload validation and storage
"""
