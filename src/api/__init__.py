"""
FastAPI application layer for SnapSolve.

Exposes the solving pipeline over HTTP so a front end can submit typed or
photographed problems and render the sanitized solution.
"""
