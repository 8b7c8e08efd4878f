"""
Application Layer

Contains the playback session state machine and the per-guild session registry.
This layer orchestrates domain objects and the infrastructure ports.

Structure:
- services/: PlaybackSession and SessionRegistry
- interfaces/: Port interfaces for infrastructure adapters
"""
