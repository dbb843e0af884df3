from __future__ import annotations

import socket


def get_lan_addresses() -> list[str]:
    """Non-loopback IPv4 addresses of this host, best guess first."""
    addresses: list[str] = []

    # Routing trick: no packet is sent, but the OS picks the outbound interface.
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("10.255.255.255", 1))
            primary = s.getsockname()[0]
            if primary and not primary.startswith("127."):
                addresses.append(primary)
    except OSError:
        pass

    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            ip = info[4][0]
            if ip.startswith("127.") or ip in addresses:
                continue
            addresses.append(ip)
    except OSError:
        pass

    return addresses
