import os

from flask import Flask

from .config import load_options
from .web import init_app

options = load_options()

# Serve the unbundled scripts from the same directory the bundler reads, so
# the per-file tags emitted in no-merge mode resolve as well.
app = Flask(
    __name__,
    static_url_path="",
    static_folder=str(options.source_root),
    template_folder=os.environ.get("TEMPLATE_FOLDER", "templates"),
)
app.secret_key = os.environ.get("SECRET_KEY", "dev")

bundle = init_app(app, options)


@app.after_request
def set_security_headers(response):
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["X-Frame-Options"] = "DENY"
    return response


if __name__ == "__main__":
    app.run(debug=os.environ.get("FLASK_DEBUG", "false").lower() == "true")
