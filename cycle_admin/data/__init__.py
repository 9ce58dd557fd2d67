"""
Data layer: Flask-SQLAlchemy models for enterprises, order cycles and their
dependents.
"""
