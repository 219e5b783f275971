from .fsh_exporter import FSHExporter

__all__ = ["FSHExporter"]
