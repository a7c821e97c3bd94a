"""
Service layer.

Each service encapsulates the business rules of one domain and is
written as a class of async classmethods.  Every method is a single
unit of work against the SQLite store: it checks the caller's
permission, mutates rows and commits.  Denied and not-found outcomes
are returned as ``None``/``False`` rather than raised.
"""
