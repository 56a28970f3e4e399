from . import area_admin, person_admin, requests_admin, systems_admin  # noqa: F401
