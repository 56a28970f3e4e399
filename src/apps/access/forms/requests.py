# src/apps/access/forms/requests.py
from __future__ import annotations

import json

from django import forms

from apps.access.models import Area
from apps.access.workflow import Action, RequestKind, TargetSnapshot


def _clean_text(value) -> str:
    return " ".join(str(value or "").strip().split())


class SystemsField(forms.Field):
    """
    Sistemas seleccionados. Acepta una lista (JSON) o su texto serializado:
        [{"system_id": 3, "detail": "carpeta compartida"}, 5, ...]
    Devuelve [(system_id, detail), ...] en el orden recibido.
    """

    default_error_messages = {
        "invalid": "Formato de sistemas inválido.",
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        if not isinstance(value, (list, tuple)):
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")

        out: list[tuple[int, str]] = []
        for row in value:
            if isinstance(row, dict):
                raw_id, detail = row.get("system_id", row.get("id")), row.get("detail", "")
            else:
                raw_id, detail = row, ""
            try:
                system_id = int(raw_id)
            except (TypeError, ValueError):
                raise forms.ValidationError(
                    f"Id de sistema inválido: {raw_id!r}.", code="invalid")
            out.append((system_id, str(detail or "").strip()))
        return out


class RequestCreateForm(forms.Form):
    """
    Alta de solicitud (OGA).

    En BAJA / MODIFICACION alcanza con el documento: el resto del snapshot
    sale del directorio.
    """

    kind = forms.ChoiceField(label="Tipo", choices=RequestKind.choices)
    full_name = forms.CharField(label="Nombre completo", max_length=200, required=False)
    document = forms.CharField(label="Documento", max_length=32)
    job_title = forms.CharField(label="Cargo", max_length=160, required=False)
    area = forms.ModelChoiceField(
        label="Área",
        queryset=Area.objects.filter(is_active=True).order_by("name"),
        required=False,
    )
    systems = SystemsField(label="Sistemas", required=False)
    attachment = forms.FileField(label="Sustento", required=False)

    def clean_kind(self) -> str:
        return _clean_text(self.cleaned_data.get("kind")).upper()

    def clean_full_name(self) -> str:
        return _clean_text(self.cleaned_data.get("full_name"))

    def clean_document(self) -> str:
        v = _clean_text(self.cleaned_data.get("document"))
        if not v:
            raise forms.ValidationError("El documento es obligatorio.")
        return v

    def clean_job_title(self) -> str:
        return _clean_text(self.cleaned_data.get("job_title"))

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("kind") == RequestKind.ALTA and not cleaned.get("full_name"):
            self.add_error("full_name", "El nombre es obligatorio para un alta.")
        return cleaned

    def to_target(self) -> TargetSnapshot:
        area = self.cleaned_data.get("area")
        return TargetSnapshot(
            full_name=self.cleaned_data.get("full_name", ""),
            document=self.cleaned_data["document"],
            job_title=self.cleaned_data.get("job_title", ""),
            area_id=area.pk if area else None,
            area_name=area.name if area else "",
        )


class RequestEditForm(forms.Form):
    """Edición del solicitante: solo cambia lo que viene en el cuerpo."""

    TARGET_FIELDS = ("full_name", "document", "job_title", "area")

    full_name = forms.CharField(max_length=200, required=False)
    document = forms.CharField(max_length=32, required=False)
    job_title = forms.CharField(max_length=160, required=False)
    area = forms.ModelChoiceField(
        queryset=Area.objects.filter(is_active=True).order_by("name"),
        required=False,
    )
    systems = SystemsField(required=False)
    attachment = forms.FileField(required=False)
    version = forms.IntegerField(required=False, min_value=0)

    def _sent(self, name: str) -> bool:
        return name in self.data or name in self.files

    def to_target(self, current: TargetSnapshot) -> TargetSnapshot | None:
        if not any(self._sent(name) for name in self.TARGET_FIELDS):
            return None
        area = self.cleaned_data.get("area")
        return TargetSnapshot(
            full_name=_clean_text(self.cleaned_data.get("full_name"))
            if self._sent("full_name") else current.full_name,
            document=_clean_text(self.cleaned_data.get("document"))
            if self._sent("document") else current.document,
            job_title=_clean_text(self.cleaned_data.get("job_title"))
            if self._sent("job_title") else current.job_title,
            area_id=(area.pk if area else None) if self._sent("area") else current.area_id,
        )

    def to_systems(self) -> list[tuple[int, str]] | None:
        if not self._sent("systems"):
            return None
        return self.cleaned_data.get("systems") or []


class TransitionForm(forms.Form):
    action = forms.ChoiceField(choices=Action.choices)
    item_id = forms.IntegerField(required=False)
    completed = forms.CharField(required=False)
    observation = forms.CharField(required=False)
    reason = forms.CharField(required=False)
    version = forms.IntegerField(required=False, min_value=0)

    def payload(self) -> dict:
        out = {}
        for name in ("item_id", "completed", "reason"):
            value = self.cleaned_data.get(name)
            if value not in (None, ""):
                out[name] = value
        if "observation" in self.data:
            out["observation"] = self.cleaned_data.get("observation") or ""
        return out
