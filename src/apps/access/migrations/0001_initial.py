from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


REQUEST_KIND_CHOICES = [
    ("ALTA", "Alta"),
    ("BAJA", "Baja"),
    ("MODIFICACION", "Modificación"),
]

REQUEST_STATUS_CHOICES = [
    ("PENDIENTE_ALTA", "Pendiente (alta)"),
    ("EN_PROCESO_ALTA", "En proceso (alta)"),
    ("TECNICO_ALTA", "Atención técnica (alta)"),
    ("PARA_VALIDAR_ALTA", "Para validar (alta)"),
    ("COMPLETADO_ALTA", "Completado (alta)"),
    ("PENDIENTE_BAJA", "Pendiente (baja)"),
    ("EN_PROCESO_BAJA", "En proceso (baja)"),
    ("TECNICO_BAJA", "Atención técnica (baja)"),
    ("PARA_VALIDAR_BAJA", "Para validar (baja)"),
    ("COMPLETADO_BAJA", "Completado (baja)"),
    ("PENDIENTE_MODIFICACION", "Pendiente (modificación)"),
    ("EN_PROCESO_MODIFICACION", "En proceso (modificación)"),
    ("TECNICO_MODIFICACION", "Atención técnica (modificación)"),
    ("PARA_VALIDAR_MODIFICACION", "Para validar (modificación)"),
    ("COMPLETADO_MODIFICACION", "Completado (modificación)"),
    ("OBSERVADO", "Observado"),
    ("ANULADO", "Anulado"),
]

ROLE_CHOICES = [
    ("SOLICITANTE", "Solicitante (OGA)"),
    ("COORDINADOR", "Coordinación (USEI)"),
    ("TECNICO", "Técnico (ETIC)"),
    ("APROBADOR", "Jefatura (Jefe ETIC)"),
]

EVENT_ACTION_CHOICES = [
    ("create", "Crear"),
    ("edit", "Editar"),
    ("start", "Iniciar"),
    ("send_to_technical", "Pasar a atención técnica"),
    ("toggle_line_item", "Marcar sistema"),
    ("send_to_validate", "Enviar a validar"),
    ("approve", "Aprobar"),
    ("observe", "Observar"),
    ("resubmit", "Reenviar"),
    ("annul", "Anular"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Area",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160, unique=True, verbose_name="Nombre")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Área",
                "verbose_name_plural": "Áreas",
                "ordering": ("name",),
            },
        ),
        migrations.CreateModel(
            name="System",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160, verbose_name="Nombre")),
                ("code", models.SlugField(help_text="Identificador textual único, ej: CORREO, SIGEIN.", max_length=40, unique=True, verbose_name="Código")),
                ("applies_alta", models.BooleanField(default=True, verbose_name="Aplica a altas")),
                ("applies_baja", models.BooleanField(default=True, verbose_name="Aplica a bajas")),
                ("requires_detail", models.BooleanField(default=False, help_text="Si está marcado, la solicitud debe indicar un detalle (ej: ruta de la carpeta).", verbose_name="Requiere detalle")),
                ("is_active", models.BooleanField(default=True, verbose_name="Habilitado")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Sistema",
                "verbose_name_plural": "Sistemas",
                "ordering": ("name",),
                "indexes": [
                    models.Index(fields=["is_active", "applies_alta"], name="access_sys_alta_idx"),
                    models.Index(fields=["is_active", "applies_baja"], name="access_sys_baja_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Person",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=200, verbose_name="Nombre completo")),
                ("document", models.CharField(max_length=32, unique=True, verbose_name="Documento")),
                ("job_title", models.CharField(blank=True, default="", max_length=160, verbose_name="Cargo")),
                ("email", models.EmailField(blank=True, default="", max_length=254, verbose_name="Email")),
                ("status", models.CharField(choices=[("ACTIVO", "Activo"), ("INACTIVO", "Inactivo")], default="ACTIVO", max_length=8)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado")),
                ("area", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="people", to="access.area")),
                ("systems", models.ManyToManyField(blank=True, related_name="holders", to="access.system")),
            ],
            options={
                "verbose_name": "Persona",
                "verbose_name_plural": "Personas",
                "ordering": ("full_name",),
                "indexes": [
                    models.Index(fields=["status", "full_name"], name="access_person_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=ROLE_CHOICES, max_length=16)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("area", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="accounts", to="access.area")),
                ("person", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="accounts", to="access.person")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="access_account", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Cuenta",
                "verbose_name_plural": "Cuentas",
                "ordering": ("user__username",),
            },
        ),
        migrations.CreateModel(
            name="AccessRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=REQUEST_KIND_CHOICES, max_length=16)),
                ("status", models.CharField(choices=REQUEST_STATUS_CHOICES, max_length=32)),
                ("version", models.PositiveIntegerField(default=0)),
                ("target_full_name", models.CharField(max_length=200, verbose_name="Nombre")),
                ("target_document", models.CharField(max_length=32, verbose_name="Documento")),
                ("target_job_title", models.CharField(blank=True, default="", max_length=160, verbose_name="Cargo")),
                ("target_area_name", models.CharField(blank=True, default="", max_length=160, verbose_name="Área")),
                ("reason", models.TextField(blank=True, default="", verbose_name="Motivo de observación")),
                ("attachment", models.FileField(blank=True, default="", upload_to="sustentos/%Y/%m/", verbose_name="Sustento")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="access_requests", to=settings.AUTH_USER_MODEL)),
                ("person", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="access.person")),
                ("target_area", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="access.area")),
            ],
            options={
                "verbose_name": "Solicitud",
                "verbose_name_plural": "Solicitudes",
                "ordering": ("-created_at",),
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="access_req_status_idx"),
                    models.Index(fields=["kind", "created_at"], name="access_req_kind_idx"),
                    models.Index(fields=["owner", "created_at"], name="access_req_owner_idx"),
                    models.Index(fields=["target_document"], name="access_req_document_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccessRequestItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("system_name", models.CharField(max_length=160)),
                ("requires_detail", models.BooleanField(default=False)),
                ("detail", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("PENDIENTE", "Pendiente"), ("COMPLETADO", "Completado")], default="PENDIENTE", max_length=12)),
                ("observation", models.TextField(blank=True, default="", verbose_name="Observación técnica")),
                ("order", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("request", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="access.accessrequest")),
                ("system", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="request_items", to="access.system")),
            ],
            options={
                "verbose_name": "Ítem de solicitud",
                "verbose_name_plural": "Ítems de solicitud",
                "ordering": ("order", "id"),
                "constraints": [
                    models.UniqueConstraint(fields=("request", "system"), name="uniq_request_system"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccessRequestEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=EVENT_ACTION_CHOICES, max_length=24)),
                ("from_status", models.CharField(blank=True, default="", max_length=32)),
                ("to_status", models.CharField(max_length=32)),
                ("actor_role", models.CharField(choices=ROLE_CHOICES, max_length=16)),
                ("reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="access_request_events", to=settings.AUTH_USER_MODEL)),
                ("request", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="events", to="access.accessrequest")),
            ],
            options={
                "verbose_name": "Evento de solicitud",
                "verbose_name_plural": "Eventos de solicitud",
                "ordering": ("created_at", "id"),
            },
        ),
    ]
