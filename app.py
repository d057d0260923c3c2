"""
SecureDrop Files — serves secured files by URL + key.
Run: flask --app app run
CLI: flask --app app secured-add SOURCE [RELATIVE_PATH]
     flask --app app secured-delete URL
     flask --app app secured-init
     flask --app app secured-history PATH
"""
import click
from flask import Flask, request, abort

import config
from database import init_db
from audit import log as audit_log, path_history
from secured_files import (
    StoreConfig, SecuredFileStore, SecuredFileError, Valid,
)

def create_app(store_config: StoreConfig | None = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_CONTENT_LENGTH
    store = SecuredFileStore(store_config or StoreConfig.from_env())
    app.extensions["secured_store"] = store

    init_db()

    # --- Secured file access: /<relative path>?k=<key>[&d=1] ---
    @app.route("/<path:relative_path>")
    def read_secured(relative_path):
        key = request.args.get(store.config.url_key_arg, "")
        download = request.args.get("d") == "1"
        visitor = request.remote_addr or "anonymous"
        result = store.verify(relative_path, key)
        if not isinstance(result, Valid):
            audit_log("secured_denied", visitor, relative_path, result.reason)
            abort(404, description=result.reason)
        if download:
            audit_log("secured_download", visitor, relative_path)
            return result.handle.force_download()
        audit_log("secured_read", visitor, relative_path)
        return result.handle.render()

    # --- CLI ---
    @app.cli.command("secured-init")
    def secured_init():
        """Create the store directory and its protective files."""
        written = store.ensure_ready()
        click.echo(f"Store ready at {store.config.store_path} (written: {', '.join(written) or 'none'})")

    @app.cli.command("secured-add")
    @click.argument("source", type=click.Path(exists=True, dir_okay=False))
    @click.argument("relative_path", default="")
    def secured_add(source, relative_path):
        """Add SOURCE to the store and print its secured URLs."""
        try:
            urls = store.add(source, relative_path)
        except SecuredFileError as e:
            raise click.ClickException(str(e))
        audit_log("secured_add", "cli", urls["read"].split("?")[0])
        click.echo(f"read: {urls['read']}")
        click.echo(f"download: {urls['download']}")

    @app.cli.command("secured-delete")
    @click.argument("url")
    def secured_delete(url):
        """Delete the secured file referenced by URL."""
        try:
            path, _ = store.parse_url(url)
            store.delete_from_url(url)
        except SecuredFileError as e:
            raise click.ClickException(str(e))
        audit_log("secured_delete", "cli", path)
        click.echo("Deleted.")

    @app.cli.command("secured-history")
    @click.argument("path")
    def secured_history(path):
        """Show recorded access to PATH, newest first."""
        for row in path_history(path):
            reason = f" ({row['reason']})" if row["reason"] else ""
            click.echo(f"{row['timestamp']} {row['action']} {row['visitor']}{reason}")

    return app

if __name__ == "__main__":
    create_app().run(debug=True, port=5000)
