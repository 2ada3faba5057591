"""ModelGate: provider mediation layer for a multi-provider chatbot."""

__version__ = "0.1.0"
