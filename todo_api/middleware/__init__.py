"""
Todo API — Middleware Package
===============================

Middleware Chain:
    Request → [Request context: id + access log] → Route Handler

    A single middleware assigns the request id and logs the access line, so
    the id is always set when the line is written.
"""
