"""Presentation layer: blueprints, templates and static assets."""
