# Routes package init
"""
EventDesk Backend — API Routes Package
========================================

Route Inventory:
    - events.py:  GET/POST {base}/events, PUT/DELETE {base}/events/{id}
    - health.py:  GET /health

Routes stay thin: they pull values out of the request, call EventService and
render its result. Business rules live in the service layer.
"""
