"""
scriptframe

Turns narrative scripts into image prompts with Gemini and renders them
with Imagen or Stability AI.
"""

__version__ = "1.0.0"
__author__ = "scriptframe Team"
__description__ = "Script-to-storyboard prompt and image generation client"
