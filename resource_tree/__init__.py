"""Client library for browsing and reorganizing project resource trees."""
