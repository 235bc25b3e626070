"""
Beer recommendation engine.

Responsibilities:
- Match a taste profile against the brewery inventory.
- Choose between personalized, default and related-product recommendations.
- Translate upstream failures into a single HTTP error shape.
"""
