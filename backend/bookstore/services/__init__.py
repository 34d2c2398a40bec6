# Services package init
"""
Bookstore Backend — Services Layer
====================================

What:  Logic between routes (HTTP) and the in-memory record store.

Service Inventory:
    - ResourceStore: Generic versioned record store (pagination, ordering,
                     compare-and-set updates)
    - BookService:   Book CRUD on top of a ResourceStore[BookData]
"""
