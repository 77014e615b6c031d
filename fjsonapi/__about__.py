__version__ = "1.0.0"
__description__ = "fjsonapi : JSON:API (de)serialization for Flask and SQLAlchemy"
