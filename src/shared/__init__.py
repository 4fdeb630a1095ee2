"""
Shared Layer - Cross-Cutting Concerns
Database, logging, errors, HTTP helpers and the background task queue
"""
