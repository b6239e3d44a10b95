"""
Restaurant catalogue package.

Responsibilities:
- Hold the in-memory restaurant catalogue seeded from the bundled CSV.
- Track live occupancy and derive crowd level, status colour and wait time.
- Manage promotions attached to restaurants.
- Collect diner reviews and keep each restaurant's rating at their average.
- Keep per-diner bookmarks.
"""
