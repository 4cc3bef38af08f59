"""URL discovery strategies for course sites."""

from academy_scraper.discovery.base import BaseDiscoverer, DiscoveredURL
from academy_scraper.discovery.course import CourseDiscoverer
from academy_scraper.discovery.manual import ManualDiscoverer

__all__ = [
    "BaseDiscoverer",
    "DiscoveredURL",
    "CourseDiscoverer",
    "ManualDiscoverer",
]
