"""University website chatbot: REST API and conversation widget."""

__version__ = "1.0.0"
