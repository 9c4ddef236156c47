"""
JSON API routes: the WhatsApp webhook and the internal send endpoint
"""
