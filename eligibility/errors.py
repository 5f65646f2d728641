"""Errors that abort a pipeline run."""


class PipelineError(Exception):
    """Base exception for every condition that stops a run."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingInputError(PipelineError):
    """Raised when a required source file or sheet is absent."""

    def __init__(self, sources: list[str]) -> None:
        message = f"Arquivo(s) necessário(s) não encontrado(s): {', '.join(sources)}"
        super().__init__(message)
        self.sources = list(sources)


class MissingColumnError(PipelineError):
    """Raised when a required column resolves neither by name nor by position."""

    def __init__(self, columns: list[str]) -> None:
        message = f"Coluna(s) obrigatória(s) não localizada(s): {', '.join(columns)}"
        super().__init__(message)
        self.columns = list(columns)


class EmptyRelationError(PipelineError):
    """Raised when the primary source holds no data rows."""

    def __init__(self, source: str) -> None:
        super().__init__(f"Relatório vazio: {source}")
        self.source = source


class UnsupportedFileError(PipelineError):
    """Raised when no reader is registered for a file."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Formato de arquivo não suportado: {path}")
        self.path = path
