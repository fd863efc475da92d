"""Transient toast notifications raised by the view controllers."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Toast(BaseModel):
    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT


class Notifier:
    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def success(self, description: str, title: str = "Success") -> Toast:
        return self._push(Toast(title=title, description=description))

    def error(self, description: str, title: str = "Error") -> Toast:
        return self._push(Toast(title=title, description=description, variant=ToastVariant.DESTRUCTIVE))

    def drain(self) -> list[Toast]:
        """Return pending toasts and clear the queue."""
        toasts, self.toasts = self.toasts, []
        return toasts

    def _push(self, toast: Toast) -> Toast:
        self.toasts.append(toast)
        return toast
