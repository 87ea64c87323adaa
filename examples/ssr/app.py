"""SSR cache demo: JSON routes plus cached server-rendered pages.

JSON endpoints are explicit routes and never cached. Every other path is
rendered from ``templates/document.html`` once, then served from memory
with ``X-Cache: HIT`` until the two-day TTL runs out.

Run:
    python app.py
"""

import itertools
from pathlib import Path

from roost import App, AppConfig, Request, Template

TEMPLATES_DIR = Path(__file__).parent / "templates"

app = App(AppConfig(template_dir=TEMPLATES_DIR))

_renders = itertools.count(1)


@app.route("/api/hello", methods=["GET", "PUT"])
def hello(request: Request):
    return {"message": "Hello, world!", "method": request.method}


@app.route("/api/hello/{name}")
def hello_name(name: str):
    return {"message": f"Hello, {name}!"}


@app.renderer
def render(request: Request):
    return Template(
        "document.html",
        title="Roost SSR + Cache",
        path=request.path,
        renders=next(_renders),
    )


if __name__ == "__main__":
    app.run()
