"""CulturalBot: a travel chatbot over free public APIs with curated fallbacks."""

__version__ = "1.0.0"
