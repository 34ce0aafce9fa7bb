"""
Horizon Queries

This package builds request URLs for the Horizon HTTP API and fetches them.

Key Components:
- filters.py: Composes one request URL from a resource, filters and query parameters
- call_builder.py: The generic fluent CallBuilder and the table of resource filters
- server.py: Server, handing out call builders per resource
- __main__.py: CLI interface for ad-hoc queries

Filters narrow a resource listing to a parent record, for example the payments of one
account (/accounts/{id}/payments). Only the last filter added to a builder takes
effect. Pagination (cursor, limit, order) and flags such as include_failed are query
parameters and are kept independently of the filters.
"""
