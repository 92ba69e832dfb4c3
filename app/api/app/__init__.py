"""앱 API 라우터 패키지: 모든 앱(직원용) 엔드포인트 통합.

App API Router package. Aggregates all employee-facing endpoints into a
single router for inclusion in the FastAPI application.

Included routers:
    - attendances: 내 출퇴근/근태 (My clock-in/out, status and history)
    - office: 사무실 거리 확인 (Office distance preview)
    - overtime: 내 초과근무 신청 (My overtime requests)
    - visits: 내 외근 방문 (My field visits)
    - approvals: 승인권자 결정 (Approver decisions on overtime and visits)
    - activity_logs: 내 활동 로그 (My activity log)
"""

from fastapi import APIRouter

from app.api.app.activity_logs import router as activity_logs_router
from app.api.app.approvals import router as approvals_router
from app.api.app.attendances import router as attendance_router
from app.api.app.office import router as office_router
from app.api.app.overtime import router as overtime_router
from app.api.app.visits import router as visits_router

app_router: APIRouter = APIRouter()

# 내 근태: /my/attendance 하위 (My attendance: clock, status, history)
app_router.include_router(attendance_router, prefix="/my/attendance", tags=["My Attendance"])
app_router.include_router(office_router, prefix="/my/office", tags=["My Office"])

# 신청: /my/overtime, /my/visits 하위 (My requests)
app_router.include_router(overtime_router, prefix="/my/overtime", tags=["My Overtime"])
app_router.include_router(visits_router, prefix="/my/visits", tags=["My Visits"])

# 승인권자: /approvals 하위 (Approver endpoints)
app_router.include_router(approvals_router, prefix="/approvals", tags=["Approvals"])

app_router.include_router(activity_logs_router, prefix="/my/activity-logs", tags=["My Activity Logs"])
