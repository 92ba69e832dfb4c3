"""레포지토리 패키지: 근태 데이터 조회/저장 계층.

Repository package. Queries for attendance records, overtime requests,
visits, activity logs and the workplace lookups (offices, schedules,
holidays). Repositories only flush; the router owns the commit.
"""
