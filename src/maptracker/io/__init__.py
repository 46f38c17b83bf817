"""IO subpackage for platform integrations.

- capture: mss-backed screen capture provider
- controls: pydirectinput-backed input injection (Windows)
- dry_run: logging stand-in with the same primitives as controls

Submodules are imported explicitly by callers; controls needs a Windows
input backend at import time.
"""
