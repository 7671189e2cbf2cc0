"""canvaspartner: conversational business-planning assistant.

A chat service whose assistant extracts Business Model Canvas data from the
conversation and persists it through model-invoked tools.
"""

__version__ = "0.1.0"
