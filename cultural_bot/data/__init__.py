from cultural_bot.data.fallback_data import FallbackData, normalize_city, display_city

__all__ = ["FallbackData", "normalize_city", "display_city"]
