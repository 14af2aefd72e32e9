"""HTTP surface: JSON API and the generator page."""
