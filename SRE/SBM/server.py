"""
Flask bridge exposing the selection engine, config import/export and the
export archive over HTTP.

Point the browser (or a reverse proxy) at this server for /api/sounds/*
and every notification sound is answered from the configured sources.
Requests we have no replacement for are redirected to VKSR_UPSTREAM when
it is set, otherwise they 404.
"""

from __future__ import annotations

import io
import logging
import mimetypes
import random
from typing import Callable, Optional

from flask import Flask, Response, jsonify, redirect, request, send_file

from SRE.SCM.settings import ReplacerSettings
from SRE.SCM.store import ConfigStore, JsonConfigStore, export_config_json, import_config_json
from SRE.SPM.export import ExportOrchestrator
from SRE.SPM.platforms import UnsupportedPlatformError
from SRE.SPM.sources import SourceFetchError, load_source_bytes, parse_data_url
from SRE.SSM.interceptor import extract_sound_name
from SRE.SSM.selector import SelectionEngine

logger = logging.getLogger(__name__)


def create_app(store: Optional[ConfigStore] = None,
               settings: Optional[ReplacerSettings] = None,
               fetch: Optional[Callable[[str], bytes]] = None,
               rng: Optional[random.Random] = None) -> Flask:
    """
    Build the bridge app.

    Args:
        store:    Configuration store; defaults to the JSON file named by
                  settings.config_path.
        settings: Runtime settings; defaults to ReplacerSettings().
        fetch:    url -> bytes used by exports (tests inject a fake).
        rng:      Random source for random / weighted selection.
    """
    settings = settings or ReplacerSettings()
    if store is None:
        store = JsonConfigStore(settings.config_path)
    engine = SelectionEngine(store, rng=rng)

    app = Flask(__name__)
    app.config["VKSR_STORE"] = store
    app.config["VKSR_SETTINGS"] = settings

    def _pass_through():
        if settings.upstream:
            target = settings.upstream + request.path
            if request.query_string:
                target += "?" + request.query_string.decode("latin-1")
            return redirect(target, code=302)
        return jsonify({"error": "no replacement configured"}), 404

    @app.route("/api/sounds/<path:name>", methods=["GET"])
    def sound(name):
        sound_name = extract_sound_name(request.path)
        source = engine.select(sound_name) if sound_name else None
        if source is None:
            return _pass_through()

        logger.info(f"Replacing sound: {sound_name}")
        if source.url.startswith(("http://", "https://")):
            return redirect(source.url, code=302)

        try:
            if source.is_inline:
                mime, data = parse_data_url(source.url)
            else:
                data = load_source_bytes(source.url)
                mime = mimetypes.guess_type(source.url)[0] or "application/octet-stream"
        except SourceFetchError as e:
            logger.error(f"{sound_name}: replacement unavailable: {e}")
            return _pass_through()
        return Response(data, mimetype=mime)

    @app.route("/vksr/config", methods=["GET"])
    def get_config():
        return Response(export_config_json(store), mimetype="application/json")

    @app.route("/vksr/config", methods=["PUT", "POST"])
    def put_config():
        if not import_config_json(store, request.get_data(as_text=True)):
            return jsonify({"error": "invalid configuration"}), 400
        return Response(export_config_json(store), mimetype="application/json")

    @app.route("/vksr/export", methods=["GET"])
    def export():
        platform = request.args.get("platform", settings.platform)
        try:
            orchestrator = ExportOrchestrator(
                store, platform=platform, fetch=fetch,
                max_workers=settings.export_workers,
                timeout=settings.fetch_timeout,
            )
        except UnsupportedPlatformError as e:
            return jsonify({"error": str(e)}), 400

        try:
            data = orchestrator.build()
        except Exception as e:
            logger.exception("Export failed")
            return jsonify({"error": str(e)}), 500
        return send_file(io.BytesIO(data), mimetype="application/zip",
                         as_attachment=True, download_name=orchestrator.filename)

    @app.route("/vksr/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    return app
