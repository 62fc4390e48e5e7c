"""Views package: HTML routes, JSON API and validation middleware."""

from butterfly_survey.views.routes import create_app

__all__ = ["create_app"]
