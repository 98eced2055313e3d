"""
Boundary layer: adapters for databases, the document index and remote services.
"""
