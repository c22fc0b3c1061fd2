"""
Domain Layer

Genre catalog, track and queue model, and the shared kernel of events,
errors and cancellation.
"""
