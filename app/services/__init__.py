"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
bug_service applies the bug lifecycle rules, auth_service checks the shared
credential pair, and view_service holds the pure filtering, grouping and
sorting functions used by both the API and the client board.
"""
