from sousvide_web import create_app
from sousvide_web.settings import settings

app = create_app()

if __name__ == "__main__":
    # Development server only. SOUSVIDE_HTTP_HOST / SOUSVIDE_HTTP_PORT pick the bind address.
    app.run(host=settings.http_host, port=settings.http_port, debug=settings.debug, use_reloader=False)
