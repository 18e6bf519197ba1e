"""Static fetcher: a single HTTP GET with browser-like headers."""

import ipaddress
import socket
from collections.abc import Mapping
from urllib.parse import urljoin, urlparse

import httpx

from app.config import BROWSER_HEADERS, MAX_CONTENT_SIZE, MAX_REDIRECTS, PAGE_TIMEOUT

ALLOWED_SCHEMES = {"http", "https"}


def _resolved_addresses(hostname: str) -> list[ipaddress.IPv4Address | ipaddress.IPv6Address]:
    """Every IP *hostname* resolves to; empty when resolution fails."""
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        return []

    addresses = []
    for *_, sockaddr in infos:
        # IPv6 zone IDs ("fe80::1%eth0") are not part of the address
        try:
            addresses.append(ipaddress.ip_address(sockaddr[0].split("%")[0]))
        except ValueError:
            continue
    return addresses


def _is_internal(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved


def validate_url(url: str) -> None:
    """Reject anything but a well-formed public http(s) URL.

    Raises:
        ValueError: on a bad scheme, missing host, unparseable port, or a host
            resolving to a private/loopback/link-local/reserved address.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")
    if not parsed.hostname:
        raise ValueError("URL must have a valid hostname.")
    try:
        parsed.port
    except ValueError as exc:
        raise ValueError(f"Invalid URL: {exc}") from exc
    if any(_is_internal(addr) for addr in _resolved_addresses(parsed.hostname)):
        raise ValueError("Requests to private/internal addresses are not allowed.")


async def _read_capped(response: httpx.Response) -> bytes:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_CONTENT_SIZE:
        raise RuntimeError("Response body exceeds the maximum allowed size.")

    body = bytearray()
    async for chunk in response.aiter_bytes():
        body.extend(chunk)
        if len(body) > MAX_CONTENT_SIZE:
            raise RuntimeError("Response body exceeds the maximum allowed size.")
    return bytes(body)


async def fetch_url(
    url: str,
    *,
    timeout: float = PAGE_TIMEOUT,
    headers: Mapping[str, str] = BROWSER_HEADERS,
    max_redirects: int = MAX_REDIRECTS,
) -> str:
    """Fetch *url* and return the decoded response body.

    Redirects are followed by hand, at most *max_redirects* hops, and every
    hop is validated before it is requested.  No retries.

    Raises:
        ValueError: if the URL or a redirect target fails validation.
        httpx.HTTPError: on timeouts, DNS/transport failures and non-2xx responses.
        httpx.InvalidURL: if httpx refuses the URL.
        RuntimeError: on too many redirects or a body larger than MAX_CONTENT_SIZE.
    """
    target = url
    hops = 0
    async with httpx.AsyncClient(follow_redirects=False, timeout=timeout, headers=headers) as client:
        while True:
            validate_url(target)
            async with client.stream("GET", target) as response:
                if not response.is_redirect:
                    response.raise_for_status()
                    body = await _read_capped(response)
                    return body.decode(response.encoding or "utf-8", errors="replace")

            if hops == max_redirects:
                raise RuntimeError("Too many redirects.")
            hops += 1
            target = urljoin(target, response.headers.get("location", ""))
