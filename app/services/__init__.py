"""서비스 패키지: 근태 비즈니스 로직 계층.

Service package. The attendance state machine, the overtime and visit
workflows, and the pure helpers they share (geofence, work calendar,
duration calculator).
"""
