# src/apps/access/management/commands/bootstrap_portal.py
from __future__ import annotations

import os
import secrets
from pathlib import Path

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError

from apps.access.models import Account, Area
from apps.access.workflow import Role


class Command(BaseCommand):
    help = (
        "Bootstrap del portal: catálogo de sistemas desde Excel, áreas y "
        "superusuario con cuenta de jefatura (opcional)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--systems-file",
            default="sistemas.xlsx",
            help="Excel del catálogo. Si no existe, se saltea la importación.",
        )
        parser.add_argument(
            "--areas",
            default=os.getenv("ACCESS_BOOTSTRAP_AREAS", ""),
            help="Áreas a crear, separadas por coma (o env ACCESS_BOOTSTRAP_AREAS).",
        )
        parser.add_argument(
            "--create-superuser",
            action="store_true",
            help="Crea superusuario usando variables de entorno (o genera .env si faltan).",
        )
        parser.add_argument(
            "--admin-role",
            default=Role.APROBADOR,
            choices=Role.values,
            help="Rol del portal para el superusuario. Por defecto: APROBADOR.",
        )
        parser.add_argument(
            "--write-env",
            action="store_true",
            help="Si faltan credenciales, genera valores y los escribe en un archivo .env local.",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING("Iniciando bootstrap del portal\n"))

        # 1) Catálogo
        systems_file = Path(options["systems_file"])
        if not systems_file.is_absolute():
            systems_file = Path(settings.BASE_DIR).parent / systems_file
        if systems_file.exists():
            self.stdout.write(self.style.MIGRATE_LABEL("→ Importar catálogo de sistemas"))
            try:
                call_command("import_systems_from_excel", file=str(systems_file))
            except Exception as exc:
                raise CommandError(
                    f"Error ejecutando 'import_systems_from_excel': {exc}") from exc
            self.stdout.write(self.style.SUCCESS("✓ Catálogo importado\n"))
        else:
            self.stdout.write(self.style.WARNING(
                f"Sin catálogo: no existe {systems_file}, se saltea.\n"))

        # 2) Áreas
        names = [n.strip() for n in options["areas"].split(",") if n.strip()]
        for name in names:
            _, created = Area.objects.get_or_create(name=" ".join(name.split()))
            if created:
                self.stdout.write(self.style.SUCCESS(f"✓ Área creada: {name}"))

        # 3) Superusuario (opcional)
        env_flag = os.getenv("DJANGO_SUPERUSER_CREATE", "").strip(
        ).lower() in ("1", "true", "yes", "si", "sí")
        if options["create_superuser"] or env_flag:
            user = self._ensure_superuser(write_env=options["write_env"])
            self._ensure_account(user, Role(options["admin_role"]))

        self.stdout.write(self.style.SUCCESS("Bootstrap finalizado correctamente"))

    def _ensure_account(self, user, role: Role) -> None:
        account, created = Account.objects.get_or_create(user=user, defaults={"role": role})
        if created:
            self.stdout.write(self.style.SUCCESS(f"✓ Cuenta {role.label} creada para {user}"))
        elif account.role != role:
            self.stdout.write(self.style.WARNING(
                f"{user} ya tiene rol {account.get_role_display()}; no se modifica."))

    def _ensure_superuser(self, *, write_env: bool):
        User = get_user_model()

        username = (os.getenv("DJANGO_SUPERUSER_USERNAME") or "").strip()
        email = (os.getenv("DJANGO_SUPERUSER_EMAIL") or "").strip()
        password = (os.getenv("DJANGO_SUPERUSER_PASSWORD") or "").strip()

        missing = [k for k, v in {
            "DJANGO_SUPERUSER_USERNAME": username,
            "DJANGO_SUPERUSER_EMAIL": email,
            "DJANGO_SUPERUSER_PASSWORD": password,
        }.items() if not v]

        if missing and write_env:
            username = username or "admin"
            email = email or "admin@example.com"
            password = password or secrets.token_urlsafe(24)

            self._append_env_file({
                "DJANGO_SUPERUSER_CREATE": "1",
                "DJANGO_SUPERUSER_USERNAME": username,
                "DJANGO_SUPERUSER_EMAIL": email,
                "DJANGO_SUPERUSER_PASSWORD": password,
            })
            self.stdout.write(self.style.WARNING(
                "Se generaron credenciales y se escribieron en .env (solo para entorno local)."
            ))
        elif missing:
            # En deploy: no inventar secretos silenciosamente
            raise CommandError(
                "Faltan variables para crear superusuario: "
                + ", ".join(missing)
                + ". Definilas en el entorno o ejecutá con --write-env en local."
            )

        user = User.objects.filter(username=username).first()
        if user:
            if not user.is_superuser or not user.is_staff:
                user.is_staff = True
                user.is_superuser = True
                user.email = email or user.email
                user.set_password(password)
                user.save(update_fields=["is_staff", "is_superuser", "email", "password"])
                self.stdout.write(self.style.SUCCESS(f"✓ Superusuario actualizado: {username}"))
            else:
                self.stdout.write(self.style.SUCCESS(f"✓ Superusuario ya existe: {username}"))
            return user

        user = User.objects.create_superuser(username=username, email=email, password=password)
        self.stdout.write(self.style.SUCCESS(f"✓ Superusuario creado: {username}"))
        return user

    def _append_env_file(self, values: dict[str, str]) -> None:
        env_path = Path(settings.BASE_DIR).parent / ".env"
        existing = env_path.read_text(encoding="utf-8") if env_path.exists() else ""
        lines = [
            f"{key}={value}"
            for key, value in values.items()
            if f"{key}=" not in existing
        ]
        if not lines:
            return
        with env_path.open("a", encoding="utf-8") as fh:
            if existing and not existing.endswith("\n"):
                fh.write("\n")
            fh.write("\n".join(lines) + "\n")
