"""Transport bindings for mwosp.

A FastAPI application serving the protocol over a WebSocket, plus an
HTTP polling variant that reuses the same dispatcher and render engine.
"""
