#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def main():
    # src/manage.py -> src/
    base_dir = Path(__file__).resolve().parent

    # Cargar .env local (en deploy las variables vienen del entorno)
    load_dotenv(base_dir.parent / ".env")

    # Default LOCAL (el deploy lo pisa con env)
    os.environ.setdefault(
        "DJANGO_SETTINGS_MODULE",
        "config.settings"
    )

    from django.core.management import execute_from_command_line
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
