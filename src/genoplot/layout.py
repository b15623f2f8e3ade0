import functools
import os
import uuid
from html import escape
from typing import Any, Dict, List, Optional, Sequence, Tuple

from html2image import Html2Image
from PIL import Image

from genoplot.util import CONFIG, PARENT_PATH
from genoplot.widget import Widget, to_json_string


def create_parent_dir(path: str) -> None:
    """Create parent directory if it doesn't exist."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


@functools.lru_cache(maxsize=None)
def _assets() -> Tuple[str, str]:
    """The renderer module and stylesheet, inlined into every HTML output."""
    script = (PARENT_PATH / "js" / "widget.js").read_text()
    style = (PARENT_PATH / "widget.css").read_text()
    return script, style


def _script_safe(payload: str) -> str:
    # JSON escapes, so data such as "</script>" or "<!--" cannot end the block
    return payload.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def render_html(ast: Any, id: Optional[str] = None, title: Optional[str] = None) -> str:
    """
    HTML that renders `ast` with Observable Plot. With a `title` the result
    is a complete document, otherwise a fragment for a notebook cell.
    """
    id = id or f"genoplot-{uuid.uuid4().hex}"
    script, style = _assets()
    fragment = f"""
    <style>{style}</style>
    <div class="genoplot" id="{id}"></div>
    <script type="application/json">{_script_safe(to_json_string(ast))}</script>
    <script type="module">
        {script}
        const container = document.getElementById('{id}');
        renderData(container, container.nextElementSibling.textContent);
    </script>
    """
    if title is None:
        return fragment
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>{escape(title)}</title></head>
<body>{fragment}</body>
</html>
"""


class HTML:
    """Notebook display of a rendered program, for frontends without widget support."""

    def __init__(self, ast: Any):
        self.ast = ast
        self.id = f"genoplot-{uuid.uuid4().hex}"

    def _repr_mimebundle_(self, **kwargs):
        return {"text/html": render_html(self.ast, self.id)}, {}


class LayoutItem:
    """
    Anything that serializes to a renderable program: plots, tracks and the
    row/column/grid layouts combining them. Displays itself in Jupyter as a
    widget or as inline HTML (see CONFIG["display_as"]).
    """

    def __init__(self):
        self._html: Optional[HTML] = None
        self._widget: Optional[Widget] = None
        self._display_as: Optional[str] = None

    def for_json(self) -> Any:
        raise NotImplementedError("Subclasses must implement for_json method")

    def display_as(self, display_as: str) -> "LayoutItem":
        if display_as not in ("html", "widget"):
            raise ValueError("display_as must be either 'html' or 'widget'")
        self._display_as = display_as
        return self

    def __and__(self, other: Any) -> "Row":
        return Row(self, other)

    def __rand__(self, other: Any) -> "Row":
        return Row(other, self)

    def __or__(self, other: Any) -> "Column":
        return Column(self, other)

    def __ror__(self, other: Any) -> "Column":
        return Column(other, self)

    def html(self) -> HTML:
        if self._html is None:
            self._html = HTML(self.for_json())
        return self._html

    def widget(self) -> Widget:
        if self._widget is None:
            self._widget = Widget(self.for_json())
        return self._widget

    def repr(self) -> Any:
        if (self._display_as or CONFIG["display_as"]) == "widget":
            return self.widget()
        return self.html()

    def _repr_mimebundle_(self, **kwargs: Any) -> Any:
        return self.repr()._repr_mimebundle_(**kwargs)

    def _repr_html_(self) -> Optional[str]:
        bundle = self.html()._repr_mimebundle_()
        return bundle[0].get("text/html")

    def document_title(self) -> str:
        return "genoplot"

    def image_size(self) -> Tuple[int, int]:
        """Browser viewport used by save_image when no size is given."""
        return 800, 1000

    def save_html(self, path: str) -> None:
        create_parent_dir(path)
        with open(path, "w") as f:
            f.write(render_html(self.for_json(), title=self.document_title()))
        print(f"HTML saved to {path}")

    def save_image(self, path: str, width: Optional[int] = None, height: Optional[int] = None) -> None:
        """Screenshot the plot in a headless browser and crop it to its content."""
        create_parent_dir(path)
        default_width, default_height = self.image_size()
        browser = Html2Image(
            output_path=os.path.dirname(os.path.abspath(path)),
            size=(width or default_width, height or default_height),
        )
        browser.screenshot(
            html_str=render_html(self.for_json(), title=self.document_title()),
            save_as=os.path.basename(path),
        )
        with Image.open(path) as img:
            cropped = img.crop(img.getbbox())
        cropped.save(path)
        print(f"Image saved to {path}")


class JSCall(LayoutItem):
    """A call of a JavaScript function, eg. Plot.dot(rows, options)."""

    def __init__(self, path: str, args: Sequence[Any] = ()):
        super().__init__()
        self.path = path
        self.args = tuple(args)

    def __repr__(self):
        return f"{self.path}({', '.join('...' if isinstance(a, list) else repr(a) for a in self.args)})"

    def for_json(self) -> dict:
        return {"__type__": "function", "path": self.path, "args": list(self.args)}


class JSRef(LayoutItem):
    """
    A name in the renderer's scope (eg. `Plot`). Attribute access walks into
    it and calling it builds a JSCall: JSRef("Plot").dot(rows) is Plot.dot(rows).
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.__name__ = path.split(".")[-1]

    def __call__(self, *args: Any) -> JSCall:
        return JSCall(self.path, args)

    def __getattr__(self, name: str) -> "JSRef":
        if name.startswith("_"):
            raise AttributeError(name)
        return JSRef(f"{self.path}.{name}")

    def __repr__(self):
        return self.path

    def for_json(self) -> dict:
        return {"__type__": "js_ref", "path": self.path}


class JSCode(LayoutItem):
    """JavaScript source evaluated in the renderer, eg. a reducer or tick formatter."""

    def __init__(self, code: str):
        super().__init__()
        self.code = code

    def __repr__(self):
        return f"js({self.code!r})"

    def for_json(self) -> dict:
        return {"__type__": "js_source", "value": self.code}


def js(txt: str) -> JSCode:
    return JSCode(txt)


class _Layout(LayoutItem):
    """Children arranged by a layout component of the renderer."""

    component = ""

    def __init__(self, items: Sequence[Any], options: Dict[str, Any]):
        super().__init__()
        self.items: List[Any] = []
        self.options: Dict[str, Any] = {}
        for item in items:
            # nested layouts of the same kind are flattened, dicts are options
            if type(item) is type(self):
                self.items.extend(item.items)
                self.options.update(item.options)
            elif isinstance(item, dict):
                self.options.update(item)
            else:
                self.items.append(item)
        self.options.update(options)

    def for_json(self) -> Any:
        return JSCall(self.component, (self.options, *self.items))


class Row(_Layout):
    """Children side by side; `a & b` is Row(a, b)."""

    component = "Row"

    def __init__(self, *items: Any, **options: Any):
        super().__init__(items, options)


class Column(_Layout):
    """Children stacked vertically; `a | b` is Column(a, b)."""

    component = "Column"

    def __init__(self, *items: Any, **options: Any):
        super().__init__(items, options)


class Grid(LayoutItem):
    """
    Children in a grid `ncols` wide, filled row by row, eg. the panels of a
    facet. A None item leaves its cell empty.
    """

    def __init__(self, *items: Any, ncols: int = 1, **options: Any):
        super().__init__()
        self.items = list(items)
        self.options = {"ncols": ncols, **options}

    def for_json(self) -> Any:
        return JSCall("Grid", (self.options, *self.items))
