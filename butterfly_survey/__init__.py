"""dKin Butterfly Club survey service: Flask MVC application.

Package layout:
    butterfly_survey/
    ├── domain/        # Enums, errors, field validators
    ├── models/        # Pydantic request schemas and records
    ├── views/         # Flask routes, JSON API, validation middleware
    ├── controllers/   # Orchestration between views and repositories
    ├── services/      # SQLAlchemy tables and repositories
    ├── templates/     # Jinja2 HTML
    └── static/        # CSS
"""

__version__ = "1.0.0"
