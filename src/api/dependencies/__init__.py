"""
FastAPI dependencies for request processing: chat sessions and pipeline objects.
"""
