"""스케줄링 순수 로직 패키지 (DB 접근 없음).

Pure scheduling logic with no database access: shop-local time helpers,
recurrence generation, week-copy arithmetic, bulk selection, drag-and-drop
resolution and tri-state bulk patches.
"""
