# Routes package init
"""
Bookstore Backend — API Routes Package
========================================

Route Inventory (prefix /{service_type_id}/api/v{service_version}):
    - books.py:   GET    /books              (list with pagination and ordering)
                  GET    /books/{id}         (get one book)
                  POST   /books              (create)
                  PATCH  /books/{id}         (partial update)
                  DELETE /books/{id}         (delete, returns the removed book)
    - health.py:  GET    /health             (service health check, no prefix)

Routes stay thin: extract parameters, call BookService, set headers.
Errors raised by the service are turned into responses by the global
handlers in main.py.
"""
