"""
Boundary layer for external system integrations.

Handles interactions with the embedding provider and the storage
collaborator, plus the in-process vector cache shared between requests.
"""
