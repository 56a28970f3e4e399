# src/apps/access/forms/systems.py
from __future__ import annotations

from django import forms

from apps.access.models import System


class SystemForm(forms.ModelForm):
    class Meta:
        model = System
        fields = [
            "name",
            "code",
            "applies_alta",
            "applies_baja",
            "requires_detail",
            "is_active",
        ]

    @staticmethod
    def _clean_text(value: str) -> str:
        return " ".join(str(value or "").strip().split())

    def clean_name(self) -> str:
        v = self._clean_text(self.cleaned_data.get("name"))
        if not v:
            raise forms.ValidationError("El nombre es obligatorio.")
        return v

    def clean_code(self) -> str:
        v = self._clean_text(self.cleaned_data.get("code")).upper()
        if not v:
            raise forms.ValidationError("El código es obligatorio.")
        return v

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get("applies_alta") and not cleaned.get("applies_baja"):
            raise forms.ValidationError("El sistema debe aplicar al menos a altas o a bajas.")
        return cleaned
