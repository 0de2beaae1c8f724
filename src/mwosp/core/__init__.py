"""Protocol core: session state machine, hit-testing and rendering.

Public API:
    Dispatcher -- applies inbound commands to a session (core.dispatcher)
    hit_test -- maps a tap to a UI action (core.hittest)
    render -- full-screen draw commands for a session (core.render)
"""
