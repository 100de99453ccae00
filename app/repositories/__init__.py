"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
BugRepository extends BaseRepository with the reference-bug queries used by
bulk delete.
"""
