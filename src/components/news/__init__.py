"""
News component.

Started/stopped snapshot cache of news posts with subscriber callbacks.
"""

from src.components.news.component import NewsCache, NewsListener

__all__ = ["NewsCache", "NewsListener"]
