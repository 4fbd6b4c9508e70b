"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
Contains the repository classes and the predicate composer used by member
search. Repositories take the session as an argument and hold no state.
"""
