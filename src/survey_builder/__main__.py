"""Allows execution via: python -m survey_builder"""

from survey_builder.cli import app

if __name__ == "__main__":
    app()
