# src/apps/access/services/notifications.py
from __future__ import annotations

import base64
import logging
from email.mime.text import MIMEText

from django.conf import settings
from django.db import transaction

from apps.access.models import AccessRequest
from apps.access.workflow import Phase, RequestStatus, Role
from apps.access.workflow.states import stage_of

logger = logging.getLogger("apps.access")


# Quién se entera de cada posición del flujo.
_ROLES_BY_STAGE = {
    Phase.PENDIENTE: (Role.COORDINADOR,),
    Phase.EN_PROCESO: (Role.TECNICO,),
    Phase.TECNICO: (Role.TECNICO,),
    Phase.PARA_VALIDAR: (Role.APROBADOR,),
}
# Posiciones en las que además se avisa al solicitante.
_OWNER_STAGES = {RequestStatus.OBSERVADO, Phase.COMPLETADO}


# -------------------------------------------------
# EMAIL: DEV/TEST (backend de Django) / PROD (Gmail API OAuth)
# -------------------------------------------------
def _send_email_backend(subject: str, body: str, recipients: list[str]) -> None:
    from django.core.mail import send_mail

    if not recipients:
        return

    send_mail(
        subject=subject,
        message=body,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@local"),
        recipient_list=recipients,
        fail_silently=False,
    )


def _send_email_gmail_oauth(subject: str, body: str, recipients: list[str]) -> None:
    logger.info("[EMAIL] Gmail OAuth. Destinatarios: %s", recipients)
    if not recipients:
        return

    client_id = getattr(settings, "GMAIL_OAUTH_CLIENT_ID", "")
    client_secret = getattr(settings, "GMAIL_OAUTH_CLIENT_SECRET", "")
    refresh_token = getattr(settings, "GMAIL_OAUTH_REFRESH_TOKEN", "")
    sender = getattr(settings, "GMAIL_OAUTH_SENDER", "")

    missing = [
        k
        for k, v in {
            "GMAIL_OAUTH_CLIENT_ID": client_id,
            "GMAIL_OAUTH_CLIENT_SECRET": client_secret,
            "GMAIL_OAUTH_REFRESH_TOKEN": refresh_token,
            "GMAIL_OAUTH_SENDER": sender,
        }.items()
        if not v
    ]
    if missing:
        raise RuntimeError(f"Faltan settings OAuth Gmail: {', '.join(missing)}")

    from google.oauth2.credentials import Credentials
    from googleapiclient.discovery import build

    creds = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri="https://oauth2.googleapis.com/token",
        client_id=client_id,
        client_secret=client_secret,
        scopes=["https://www.googleapis.com/auth/gmail.send"],
    )
    service = build("gmail", "v1", credentials=creds, cache_discovery=False)

    msg = MIMEText(body, "plain", "utf-8")
    msg["to"] = ", ".join(recipients)
    msg["from"] = sender
    msg["subject"] = subject

    raw = base64.urlsafe_b64encode(msg.as_bytes()).decode("utf-8")
    ret = service.users().messages().send(userId="me", body={"raw": raw}).execute()
    logger.info("[EMAIL] Mensaje enviado. Response ID: %s", ret.get("id"))


def send_email(subject: str, body: str, recipients: list[str]) -> None:
    if bool(getattr(settings, "USE_GMAIL_OAUTH", False)):
        _send_email_gmail_oauth(subject, body, recipients)
        return
    _send_email_backend(subject, body, recipients)


# -------------------------------------------------
# Armado del aviso
# -------------------------------------------------
def recipients_for(obj: AccessRequest) -> list[str]:
    configured = getattr(settings, "ACCESS_NOTIFY_EMAILS", {}) or {}
    stage = stage_of(obj.status)

    out: list[str] = []
    for role in _ROLES_BY_STAGE.get(stage, ()):
        out.extend(configured.get(role.value, []) or [])
    if stage in _OWNER_STAGES and getattr(obj.owner, "email", ""):
        out.append(obj.owner.email)

    # sin repetidos, respetando el orden
    return list(dict.fromkeys(e.strip() for e in out if e and e.strip()))


def _compose(obj: AccessRequest, action: str) -> tuple[str, str]:
    subject = (
        f"[Accesos] Solicitud #{obj.pk}: {obj.get_kind_display()} - "
        f"{obj.get_status_display()}"
    )
    lines = [
        f"Solicitud: #{obj.pk}",
        f"Tipo: {obj.get_kind_display()}",
        f"Estado: {obj.get_status_display()}",
        f"Acción: {action}",
        f"Persona: {obj.target_full_name}",
        f"Documento: {obj.target_document}",
    ]
    if obj.target_area_name:
        lines.append(f"Área: {obj.target_area_name}")
    if obj.status == RequestStatus.OBSERVADO and obj.reason:
        lines.append(f"Motivo de la observación: {obj.reason}")
    systems = [it.system_name for it in obj.items.all()]
    if systems:
        lines.append("Sistemas: " + ", ".join(systems))
    return subject, "\n".join(lines) + "\n"


def notify_transition(request_id: int, action: str) -> bool:
    """Envía el aviso del estado actual de la solicitud. Devuelve False si no hay destinatarios."""
    obj = AccessRequest.objects.select_related("owner").get(pk=request_id)
    recipients = recipients_for(obj)
    if not recipients:
        logger.info("[EMAIL] Sin destinatarios para #%s en %s.", obj.pk, obj.status)
        return False

    subject, body = _compose(obj, action)
    send_email(subject, body, recipients)
    logger.info("[EMAIL] Aviso #%s (%s) enviado a %s", obj.pk, obj.status, recipients)
    return True


def schedule_notification(request_id: int, action: str) -> None:
    """Encola el aviso para después del commit; un fallo de correo no revierte la transición."""

    def _on_commit_send():
        try:
            notify_transition(request_id, action)
        except Exception as e:
            logger.exception(
                "[EMAIL] Falló la notificación para request_id=%s: %s", request_id, e
            )

    transaction.on_commit(_on_commit_send)
