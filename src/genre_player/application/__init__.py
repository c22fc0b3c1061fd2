"""
Application Layer

Contains the services that coordinate acquisition, queueing and playback.
This layer orchestrates domain objects and infrastructure adapters.

Structure:
- services/: Application services for acquisition, prefetch and playback sync
- interfaces/: Port interfaces for infrastructure adapters
"""
