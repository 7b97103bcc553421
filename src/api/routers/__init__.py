"""
API route handlers, one module per endpoint group (health, chats).
"""
