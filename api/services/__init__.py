"""Service layer for business logic.

Services keep routes thin and focused on HTTP handling:
- Business rules live in one place
- Calls to several repositories are orchestrated here
- Activity log entries are written alongside the changes they record

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)
                         |
                         +-> services.aggregation (pure functions, no I/O)

Services should:
- Raise domain exceptions that routes map to status codes
- Build the response schemas from repository rows and aggregation results

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
- Commit; the request session dependency owns the transaction
"""
