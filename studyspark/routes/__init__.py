"""
StudySpark Backend — API Routes Package
=========================================

Route Inventory:
    - subjects.py:     /api/subjects            CRUD, cascade delete
    - notes.py:        /api/notes               list/get/create/delete, multipart upload
    - summaries.py:    /api/summaries           list/get/delete
    - flashcards.py:   /api/flashcards          list/get/review-update/delete
    - questions.py:    /api/questions           list/get/delete
    - study_plans.py:  /api/study-plans         list/get/task toggle/delete
    - dashboard.py:    /api/dashboard/stats
    - ai.py:           /api/ai/*                generate (and persist) study material
    - health.py:       /health

Design Principle:
    Routes are thin. They read the request, call the StorageRepository or
    AIGateway, turn a None/False result into NotFoundError and pick the
    status code. Everything else lives in services and storage.
"""
