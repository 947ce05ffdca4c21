"""Pydantic 요청/응답 스키마 패키지.

Pydantic request/response schemas package.
"""
