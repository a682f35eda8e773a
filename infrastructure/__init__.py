"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - store: Relational store client (Django ORM, in-memory)
    - container: Service container wiring the store into domain services

This package enables:
    - Easy testing with an in-memory store
    - Switching between backends without code changes
    - Loose coupling between business logic and infrastructure
"""
