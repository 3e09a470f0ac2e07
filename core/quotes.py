"""Daily quote for the dashboard, computed once per day and cached."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from core.cache.daily_cache import DailyCache

logger = logging.getLogger(__name__)

QUOTES = [
    ("Great companies are built by great people, and great people are found by great recruiters.", "Anonymous", "recruitment"),
    ("Talent wins games, but teamwork and intelligence win championships.", "Michael Jordan", "teamwork"),
    ("The best way to predict the future is to create it by hiring the right people.", "Peter Drucker (adapted)", "hiring"),
    ("In the end, it's not about finding a job, it's about finding the right fit.", "Anonymous", "matching"),
    ("Every person you hire either helps or hurts your company culture.", "Tony Hsieh", "culture"),
    ("Recruiting is not about filling positions, it's about building futures.", "Anonymous", "purpose"),
    ("The art of recruitment is finding extraordinary people hiding in ordinary places.", "Anonymous", "discovery"),
    ("A-players hire A-players. B-players hire C-players.", "Steve Jobs", "excellence"),
    ("Your network is your net worth, especially in recruitment.", "Porter Gale (adapted)", "networking"),
    ("The right person in the right role can change everything.", "Anonymous", "impact"),
]

TIPS = [
    "Focus on candidate experience - every interaction matters",
    "Use data-driven insights to improve your hiring process",
    "Build relationships before you need them",
    "Personalize your outreach for better response rates",
    "Always follow up, but respect boundaries",
    "Quality over quantity in candidate sourcing",
    "Embrace technology, but don't lose the human touch",
]


class DailyQuoteService:
    def __init__(self, cache: DailyCache):
        self.cache = cache

    def quote_for(self, day: Optional[date] = None) -> Dict[str, Any]:
        day = day or date.today()
        cached = self.cache.get(day)
        if cached is not None:
            return cached

        day_of_year = day.timetuple().tm_yday
        text, author, category = QUOTES[day_of_year % len(QUOTES)]
        value = {
            "quote": {"text": text, "author": author, "category": category},
            "tip": TIPS[(day_of_year + 3) % len(TIPS)],
            "date": day.isoformat(),
        }
        self.cache.set(day, value)
        logger.debug(f"Computed daily quote for {day}")
        return value
