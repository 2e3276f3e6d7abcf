from __future__ import annotations


class PdfPostError(Exception):
    pass


class ConfigError(PdfPostError, ValueError):
    """Invalid layout configuration. Raised before any token is produced."""


class CollaboratorError(PdfPostError):
    collaborator = 'unknown'

    def __init__(self, message: str, *, collaborator: str | None = None):
        super().__init__(message)
        if collaborator:
            self.collaborator = collaborator

    def __str__(self) -> str:
        return f'[{self.collaborator}] {super().__str__()}'

    @property
    def detail(self) -> str:
        return super().__str__()


class FontEmbedError(CollaboratorError):
    collaborator = 'font_metrics'


class RenderError(CollaboratorError):
    collaborator = 'renderer'


class DeliveryError(CollaboratorError):
    collaborator = 'delivery'

    def __init__(self, message: str, *, status_code: int | None = None, error_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
