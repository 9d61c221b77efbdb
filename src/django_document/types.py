"""Helper types for IDEs, so that inline assets and custom content get syntax highlighting."""

from typing import Annotated

css = Annotated[str, "css"]
html = Annotated[str, "html"]
js = Annotated[str, "js"]
