# Small helpers used across the codebase.
#
# Target normalization (IPs, hostnames, CIDR ranges) and file name
# sanitizing for loot output.

import ipaddress
from typing import List


def is_ipv4(host: str) -> bool:
    # Fast, permissive IPv4 string check (no regex).
    #
    # Accepts dotted-quad notation and ensures each octet is in 0-255.
    parts = host.strip().split(".")
    if len(parts) != 4:
        return False
    try:
        return all(0 <= int(p) <= 255 for p in parts)
    except ValueError:
        return False


def expand_cidr(cidr: str) -> List[str]:
    """Expand a CIDR notation to a list of IP addresses.

    Args:
        cidr: CIDR notation string (e.g., '192.168.1.0/24')

    Returns:
        List of IP address strings (excludes network and broadcast for /30 and larger)

    Raises:
        ValueError: If the CIDR notation is invalid
    """
    try:
        network = ipaddress.ip_network(cidr, strict=False)
        # For /31 and /32, return all addresses (point-to-point or single host)
        if network.prefixlen >= 31:
            return [str(ip) for ip in network.hosts()] or [str(network.network_address)]
        return [str(ip) for ip in network.hosts()]
    except ValueError as e:
        raise ValueError(f"Invalid CIDR notation '{cidr}': {e}") from e


def is_cidr(target: str) -> bool:
    """Check if a string is CIDR notation (e.g., '192.168.1.0/24')."""
    if "/" not in target:
        return False
    try:
        ipaddress.ip_network(target, strict=False)
        return True
    except ValueError:
        return False


def normalize_targets(targets: List[str], domain: str = "") -> List[str]:
    """Normalize a list of targets: expand CIDRs, keep IPs, append domain for short hostnames.

    Args:
        targets: List of target strings (IPs, hostnames, FQDNs, or CIDR notation)
        domain: Domain to append to short hostnames (skipped when empty or ".")

    Returns:
        Normalized, de-duplicated list of targets in input order
    """
    out: List[str] = []
    for t in targets:
        t = t.strip()
        if not t or t.startswith("#"):
            continue
        if is_cidr(t):
            try:
                out.extend(expand_cidr(t))
            except ValueError:
                out.append(t)
        elif is_ipv4(t):
            out.append(t)
        elif "." not in t and domain and domain != ".":
            out.append(f"{t}.{domain}")
        else:
            out.append(t)

    seen = set()
    unique = []
    for t in out:
        if t.lower() in seen:
            continue
        seen.add(t.lower())
        unique.append(t)
    return unique


def safe_filename(value: str) -> str:
    """Make a host or share name usable as a file name component."""
    for ch in (":", "/", "\\", "$", " "):
        value = value.replace(ch, "_")
    return value
