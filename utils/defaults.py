"""Bundled first-launch data, in the same camelCase shape the app persists."""

DEFAULT_GRADES = [
    {
        "id": "g_default",
        "name": "First Term",
        "color": "#5E5244",
        "subjects": [
            {
                "id": "s_default_math",
                "name": "Math",
                "color": "#3B82F6",
                "rows": [{"id": "r_default_math_1", "topic": "Chapter 1"}],
            },
            {
                "id": "s_default_english",
                "name": "English",
                "color": "#8CD19D",
                "rows": [{"id": "r_default_english_1", "topic": "Unit 1"}],
            },
        ],
    }
]

DEFAULT_ISLAND_LEVELS = [
    {"level": 1, "minExp": 0, "title": "Castaway", "icon": "🌱"},
    {"level": 2, "minExp": 200, "title": "Beachcomber", "icon": "🐚"},
    {"level": 3, "minExp": 600, "title": "Islander", "icon": "🏝️"},
    {"level": 4, "minExp": 1200, "title": "Navigator", "icon": "🧭"},
    {"level": 5, "minExp": 2500, "title": "Island Sage", "icon": "🌋"},
]

DEFAULT_REWARDS = [
    {"id": "rw_break", "name": "15-minute break", "cost": 10, "icon": "☕"},
    {"id": "rw_snack", "name": "Favourite snack", "cost": 30, "icon": "🍪"},
    {"id": "rw_movie", "name": "Movie night", "cost": 120, "icon": "🎬"},
]

DEFAULT_LIBRARY_CATEGORIES = ["General", "Math", "Language"]

DEFAULT_LIBRARY = [
    {"id": "lib_default_1", "title": "Khan Academy", "url": "https://www.khanacademy.org", "category": "General"},
]

# Synthetic level used when the level table is empty or unusable.
FALLBACK_LEVEL = {"level": 1, "minExp": 0, "title": "Newcomer", "icon": "🌱"}
