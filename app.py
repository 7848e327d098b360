# Thin entrypoint exposing Dash `app` and Flask `server`
from dataproviders_demo import app, server  # noqa: F401
from dataproviders_demo import config


if __name__ == "__main__":  # pragma: no cover
    # For production: gunicorn -c gunicorn.conf.py
    app.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG)
