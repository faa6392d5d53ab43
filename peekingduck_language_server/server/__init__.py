"""LSP host of the PeekingDuck language service."""

from .server import PeekingDuckLanguageServer

__all__ = ['PeekingDuckLanguageServer']
