"""
Recommendation package.

Responsibilities:
- Score a restaurant against a diner's preferences (0-100) and explain why.
- Rank the restaurant catalogue best-first for a set of preferences.
"""
