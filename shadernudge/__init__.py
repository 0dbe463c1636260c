"""
shadernudge - live value nudging for GLSL shaders.

A numeric literal under the cursor is swapped for a placeholder uniform,
its value is streamed to a connected renderer (Blender) over a local
WebSocket channel, and the final value is written back into the source.
"""

__version__ = "0.1.0"
