"""Optional integrations for web frameworks.

This package contains optional middleware and integrations
for various web frameworks. Install with extras to use:

    pip install py-cookie-session[starlette]
"""

from __future__ import annotations
