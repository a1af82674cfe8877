"""Helper add-ons that hook into a collector's request and response callbacks.

Each function takes a collector offering ``on_request(callback)`` and
``on_response(callback)`` and registers the callbacks it needs.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from typing import Any

REFERER_KEY = "_referer"

FIREFOX_VERSIONS: tuple[float, ...] = (
    # 2020
    72.0, 73.0, 74.0, 75.0, 76.0, 77.0, 78.0, 79.0, 80.0, 81.0, 82.0, 83.0, 84.0,
    # 2021
    85.0, 86.0, 87.0,
)

CHROME_VERSIONS: tuple[str, ...] = (
    # 2020
    "79.0.3945.117", "79.0.3945.130", "80.0.3987.106", "80.0.3987.116",
    "80.0.3987.122", "80.0.3987.132", "80.0.3987.149", "80.0.3987.163",
    "80.0.3987.87", "81.0.4044.113", "81.0.4044.122", "81.0.4044.129",
    "81.0.4044.138", "81.0.4044.92", "83.0.4103.106", "83.0.4103.116",
    "83.0.4103.97", "84.0.4147.105", "84.0.4147.125", "84.0.4147.135",
    "85.0.4183.102", "85.0.4183.121", "85.0.4183.83", "86.0.4240.111",
    "86.0.4240.183", "86.0.4240.198", "86.0.4240.75",
    # 2021
    "87.0.4280.141", "87.0.4280.66", "87.0.4280.88", "88.0.4324.146",
    "88.0.4324.182", "88.0.4324.190", "89.0.4389.114", "89.0.4389.90",
    "90.0.4430.72",
)

EDGE_VERSIONS: tuple[tuple[str, str], ...] = (
    ("79.0.3945.74", "79.0.309.43"),
    ("80.0.3987.87", "80.0.361.48"),
    ("84.0.4147.105", "84.0.522.50"),
    ("89.0.4389.128", "89.0.774.77"),
    ("90.0.4430.72", "90.0.818.39"),
)

OPERA_VERSIONS: tuple[str, ...] = (
    "2.7.62 Version/11.00",
    "2.2.15 Version/10.10",
    "2.9.168 Version/11.50",
    "2.2.15 Version/10.00",
    "2.8.131 Version/11.11",
    "2.5.24 Version/10.54",
)

UCWEB_VERSIONS: tuple[str, ...] = (
    "10.9.8.1006", "11.0.0.1016", "11.0.6.1040", "11.1.0.1041",
    "11.1.1.1091", "11.1.2.1113", "11.1.3.1128", "11.2.0.1125",
    "11.3.0.1130", "11.4.0.1180", "11.4.1.1138", "11.5.2.1188",
)

ANDROID_VERSIONS: tuple[str, ...] = (
    "4.4.2", "4.4.4", "5.0", "5.0.1", "5.0.2", "5.1", "5.1.1", "5.1.2",
    "6.0", "6.0.1", "7.0", "7.1.1", "7.1.2", "8.0.0", "8.1.0", "9", "10", "11",
)

UCWEB_DEVICES: tuple[str, ...] = (
    "SM-C111", "SM-J727T1", "SM-J701F", "SM-J330G", "SM-N900", "DLI-TL20",
    "LG-X230", "AS-5433_Secret", "IdeaTabA1000-G", "GT-S5360",
    "HTC_Desire_601_dual_sim", "ALCATEL_ONE_TOUCH_7025D", "SM-N910H",
    "Micromax_Q4101", "SM-G600FY",
)

NEXUS10_BUILDS: tuple[str, ...] = (
    "JOP40D", "JOP40F", "JVP15I", "JVP15P", "JWR66Y", "KTU84P", "LMY47D",
    "LMY47V", "LMY48M", "LMY48T", "LMY48X", "LMY49F", "LMY49H", "LRX21P",
    "NOF27C",
)

NEXUS10_SAFARI: tuple[str, ...] = (
    "534.30", "535.19", "537.22", "537.31", "537.36", "600.1.4",
)

OS_STRINGS: tuple[str, ...] = (
    # macOS High Sierra
    "Macintosh; Intel Mac OS X 10_13",
    "Macintosh; Intel Mac OS X 10_13_1",
    "Macintosh; Intel Mac OS X 10_13_2",
    "Macintosh; Intel Mac OS X 10_13_3",
    "Macintosh; Intel Mac OS X 10_13_4",
    "Macintosh; Intel Mac OS X 10_13_5",
    "Macintosh; Intel Mac OS X 10_13_6",
    # macOS Mojave
    "Macintosh; Intel Mac OS X 10_14",
    "Macintosh; Intel Mac OS X 10_14_1",
    "Macintosh; Intel Mac OS X 10_14_2",
    "Macintosh; Intel Mac OS X 10_14_3",
    "Macintosh; Intel Mac OS X 10_14_4",
    "Macintosh; Intel Mac OS X 10_14_5",
    "Macintosh; Intel Mac OS X 10_14_6",
    # macOS Catalina
    "Macintosh; Intel Mac OS X 10_15",
    "Macintosh; Intel Mac OS X 10_15_1",
    "Macintosh; Intel Mac OS X 10_15_2",
    "Macintosh; Intel Mac OS X 10_15_3",
    "Macintosh; Intel Mac OS X 10_15_4",
    "Macintosh; Intel Mac OS X 10_15_5",
    "Macintosh; Intel Mac OS X 10_15_6",
    "Macintosh; Intel Mac OS X 10_15_7",
    # macOS Big Sur
    "Macintosh; Intel Mac OS X 11_0",
    "Macintosh; Intel Mac OS X 11_0_1",
    "Macintosh; Intel Mac OS X 11_1",
    "Macintosh; Intel Mac OS X 11_2",
    "Macintosh; Intel Mac OS X 11_2_1",
    "Macintosh; Intel Mac OS X 11_2_2",
    "Macintosh; Intel Mac OS X 11_2_3",
    # Windows
    "Windows NT 10.0; Win64; x64",
    "Windows NT 5.1",
    "Windows NT 6.1; WOW64",
    "Windows NT 6.1; Win64; x64",
    # Linux
    "X11; Linux x86_64",
)


def _firefox_ua(rng: random.Random) -> str:
    version = rng.choice(FIREFOX_VERSIONS)
    os_string = rng.choice(OS_STRINGS)
    return f"Mozilla/5.0 ({os_string}; rv:{version:.1f}) Gecko/20100101 Firefox/{version:.1f}"


def _chrome_ua(rng: random.Random) -> str:
    version = rng.choice(CHROME_VERSIONS)
    os_string = rng.choice(OS_STRINGS)
    return (
        f"Mozilla/5.0 ({os_string}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{version} Safari/537.36"
    )


def _edge_ua(rng: random.Random) -> str:
    chrome_version, edge_version = rng.choice(EDGE_VERSIONS)
    os_string = rng.choice(OS_STRINGS)
    return (
        f"Mozilla/5.0 ({os_string}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome_version} Safari/537.36 Edg/{edge_version}"
    )


def _opera_ua(rng: random.Random) -> str:
    version = rng.choice(OPERA_VERSIONS)
    os_string = rng.choice(OS_STRINGS)
    return f"Opera/9.80 ({os_string}; U; en) Presto/{version}"


def _ucweb_ua(rng: random.Random) -> str:
    device = rng.choice(UCWEB_DEVICES)
    version = rng.choice(UCWEB_VERSIONS)
    android = rng.choice(ANDROID_VERSIONS)
    return (
        "UCWEB/2.0 (Java; U; MIDP-2.0; Nokia203/20.37) U2/1.0.0 "
        f"UCMini/{version} (SpeedMode; Proxy; Android {android}; {device} ) U2/1.0.0 Mobile"
    )


def _nexus10_ua(rng: random.Random) -> str:
    build = rng.choice(NEXUS10_BUILDS)
    android = rng.choice(ANDROID_VERSIONS)
    chrome = rng.choice(CHROME_VERSIONS)
    safari = rng.choice(NEXUS10_SAFARI)
    return (
        f"Mozilla/5.0 (Linux; Android {android}; Nexus 10 Build/{build}) "
        f"AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{chrome} Safari/{safari}"
    )


_DESKTOP_GENERATORS: tuple[Callable[[random.Random], str], ...] = (
    _firefox_ua,
    _chrome_ua,
    _edge_ua,
    _opera_ua,
)

_MOBILE_GENERATORS: tuple[Callable[[random.Random], str], ...] = (
    _ucweb_ua,
    _nexus10_ua,
)

_rng = random.Random()


def _user_agent_setter(
    generators: Sequence[Callable[[random.Random], str]],
) -> Callable[[Any], None]:
    def set_user_agent(request: Any) -> None:
        request.headers["User-Agent"] = _rng.choice(generators)(_rng)

    return set_user_agent


def random_user_agent(collector: Any) -> None:
    """Give every request a random desktop browser User-Agent."""
    collector.on_request(_user_agent_setter(_DESKTOP_GENERATORS))


def random_mobile_user_agent(collector: Any) -> None:
    """Give every request a random mobile browser User-Agent."""
    collector.on_request(_user_agent_setter(_MOBILE_GENERATORS))


def referer(collector: Any) -> None:
    """Send the URL of the previous page as the Referer header.

    This only works for requests that share the context of the page they
    were found on, such as those started from ``Request`` callbacks.
    """

    def remember(response: Any) -> None:
        if response.ctx is not None and response.request is not None:
            response.ctx[REFERER_KEY] = response.request.url

    def apply(request: Any) -> None:
        ref = (request.ctx or {}).get(REFERER_KEY, "")
        if ref:
            request.headers["Referer"] = ref

    collector.on_response(remember)
    collector.on_request(apply)


def url_length_filter(collector: Any, url_length_limit: int) -> None:
    """Abort requests whose URL is longer than ``url_length_limit``."""

    def check(request: Any) -> None:
        if len(request.url) > url_length_limit:
            request.abort()

    collector.on_request(check)