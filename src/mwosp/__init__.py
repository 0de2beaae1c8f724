"""mwosp -- Remote-UI protocol server for thin display clients.

A small touch-screen device connects over a WebSocket, performs the
MWOSP-v1 handshake and then exchanges short text commands. The server
owns all application state and drives the client's screen with
declarative draw commands; the client only renders and reports input.
"""

__version__ = "0.1.0"
