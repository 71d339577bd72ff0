# Services package init
"""
EventDesk Backend — Services Layer
====================================

Service Inventory:
    - EventStore (abstract): what the service needs from the document store
    - EventService: the Events CRUD operations, returning Success/Failure results
"""
