class ImportPipelineError(Exception):
    pass


class UnknownSystemError(ImportPipelineError):
    def __init__(self, system_id: str) -> None:
        super().__init__(f"System not found: {system_id}")
        self.system_id = system_id


class PreviewNotFoundError(ImportPipelineError):
    def __init__(self, preview_id: str) -> None:
        super().__init__(f"Preview not found or expired: {preview_id}")
        self.preview_id = preview_id


class ChangeExecutionError(ImportPipelineError):
    """A single change could not be applied; sibling changes still commit."""
