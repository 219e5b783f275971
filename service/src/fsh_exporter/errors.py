class FshExporterError(Exception):
    pass


class InitializationError(FshExporterError):
    pass


class ResourceLoadError(FshExporterError):
    def __init__(self, file, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"failed to load resource from '{file}': {reason}")
