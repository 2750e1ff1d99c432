"""Domain layer for pocketpilot: entities, calculators and services.

Services are imported from their modules (``pocketpilot.domain.goals`` and
so on) so the database layer can depend on entities and errors alone.
"""
