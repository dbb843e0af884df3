from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..utils.ip import get_lan_addresses

bp = Blueprint("network", __name__)


@bp.get("/network-info")
def network_info():
    # Lets the host screen render a QR code other phones on the LAN can reach.
    port = request.host.rsplit(":", 1)[1] if ":" in request.host else ""
    addresses = get_lan_addresses()
    primary = addresses[0] if addresses else "localhost"
    url = f"http://{primary}:{port}" if port else f"http://{primary}"
    return jsonify({"ip": primary, "port": port, "url": url, "addresses": addresses})
