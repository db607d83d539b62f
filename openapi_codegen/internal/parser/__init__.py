from .openapi import OpenApiParser, load_document, parse_document_text

__all__ = ["OpenApiParser", "load_document", "parse_document_text"]
