# src/apps/access/management/commands/import_systems_from_excel.py
from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

try:
    import openpyxl
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "Falta 'openpyxl'. Instalalo con: pip install openpyxl") from exc

from apps.access.models import System

_TRUE = {"1", "si", "sí", "s", "x", "true", "yes", "y"}
_FLAG_COLUMNS = {
    "alta": "applies_alta",
    "baja": "applies_baja",
    "requieredetalle": "requires_detail",
    "habilitado": "is_active",
}


def _norm(s: object) -> str:
    return " ".join(str(s or "").strip().split())


def _norm_header(s: object) -> str:
    return _norm(s).lower().replace(" ", "").replace("ó", "o")


def _flag(value: object, default: bool) -> bool:
    if value is None or _norm(value) == "":
        return default
    if isinstance(value, bool):
        return value
    return _norm(value).lower() in _TRUE


class Command(BaseCommand):
    help = (
        "Importa el catálogo de sistemas desde un Excel (sistemas.xlsx). "
        "Columnas: Nombre, Codigo y opcionales Alta, Baja, RequiereDetalle, Habilitado. "
        "Hace upsert por código."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--file",
            default="sistemas.xlsx",
            help="Ruta al Excel. Por defecto: sistemas.xlsx (en la raíz del proyecto).",
        )
        parser.add_argument(
            "--sheet",
            default=None,
            help="Nombre de la hoja. Si no se indica, usa la hoja activa.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Simula la importación sin escribir en la base.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        file_opt = options["file"]
        sheet_name = options["sheet"]
        dry_run = options["dry_run"]

        # .../src/apps/access/management/commands -> raíz del proyecto
        project_root = Path(__file__).resolve().parents[5]
        xlsx_path = Path(file_opt)
        if not xlsx_path.is_absolute():
            xlsx_path = project_root / xlsx_path

        if not xlsx_path.exists():
            raise CommandError(f"No existe el archivo: {xlsx_path}")

        wb = openpyxl.load_workbook(xlsx_path, read_only=True, data_only=True)
        if sheet_name and sheet_name not in wb.sheetnames:
            raise CommandError(f"No existe la hoja: {sheet_name}")
        ws = wb[sheet_name] if sheet_name else wb.active

        rows = ws.iter_rows(values_only=True)
        try:
            header = next(rows)
        except StopIteration:
            raise CommandError("La hoja está vacía.")

        header_map = {_norm_header(h): idx for idx, h in enumerate(header) if h is not None}
        missing = [k for k in ("nombre", "codigo") if k not in header_map]
        if missing:
            raise CommandError(
                "Encabezados inválidos. Deben existir columnas: Nombre, Codigo. "
                f"Faltan: {', '.join(missing)}"
            )

        def cell(row, key):
            idx = header_map.get(key)
            return row[idx] if idx is not None and idx < len(row) else None

        created = 0
        updated = 0
        processed = 0
        skipped = 0

        for row in rows:
            processed += 1
            name = _norm(cell(row, "nombre"))
            code = _norm(cell(row, "codigo")).upper().replace(" ", "_")
            if not name or not code:
                skipped += 1
                continue

            defaults = {"name": name}
            for column, field in _FLAG_COLUMNS.items():
                default = field != "requires_detail"
                defaults[field] = _flag(cell(row, column), default)

            _, was_created = System.objects.update_or_create(code=code, defaults=defaults)
            if was_created:
                created += 1
            else:
                updated += 1

        wb.close()

        if dry_run:
            transaction.set_rollback(True)
            self.stdout.write(self.style.WARNING(
                "DRY-RUN: no se guardó nada en la DB."))

        self.stdout.write(
            self.style.SUCCESS(
                f"OK. Procesadas: {processed} | Saltadas: {skipped} | "
                f"Creados: {created} | Actualizados: {updated}"
            )
        )
