"""Handler modules for CRD resources.

Kopf handlers register themselves via decorators when handlers.operator is
imported, which main does.
"""
