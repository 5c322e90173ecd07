from docsync.models.documentation import DocumentationPage


__all__ = [
    "DocumentationPage",
]
