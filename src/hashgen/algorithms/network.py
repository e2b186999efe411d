"""Network authentication captures: NetNTLMv2 responses and WPA PMKIDs."""

from __future__ import annotations

import hashlib
import hmac
import string
from typing import List

from ..errors import InvalidOptions
from ..models import AlgorithmDescriptor, HashOptions
from ..salt import random_hex
from .digests import nt_hash

NETNTLM_CHALLENGE_HEX_LENGTH = 16

WPA_DEFAULT_SSID = "WiFi-Network"
WPA_PMK_ITERATIONS = 4096
WPA_MAX_SSID_BYTES = 32
AP_MAC = "001122334455"
CLIENT_MAC = "aabbccddeeff"


def netntlmv2_hash(text: str, options: HashOptions) -> str:
    challenge = options.salt.lower() if options.salt else random_hex(NETNTLM_CHALLENGE_HEX_LENGTH // 2)
    response = hmac.new(nt_hash(text), bytes.fromhex(challenge), hashlib.md5).hexdigest()
    return f"{response}:{challenge}"


def validate_netntlmv2(options: HashOptions) -> None:
    challenge = options.salt
    if challenge is None:
        return
    if len(challenge) != NETNTLM_CHALLENGE_HEX_LENGTH or any(c not in string.hexdigits for c in challenge):
        raise InvalidOptions(
            "netntlmv2",
            "salt",
            f"the server challenge must be {NETNTLM_CHALLENGE_HEX_LENGTH} hex characters",
        )


def wpa_pmkid_hash(text: str, options: HashOptions) -> str:
    ssid = options.salt or WPA_DEFAULT_SSID
    pmk = hashlib.pbkdf2_hmac("sha1", text.encode("utf-8"), ssid.encode("utf-8"), WPA_PMK_ITERATIONS, dklen=32)
    label = b"PMK Name" + bytes.fromhex(AP_MAC) + bytes.fromhex(CLIENT_MAC)
    pmkid = hmac.new(pmk, label, hashlib.sha1).hexdigest()[:32]
    return f"{pmkid}*{AP_MAC}*{CLIENT_MAC}"


def validate_wpa_pmkid(options: HashOptions) -> None:
    if options.salt is not None and len(options.salt.encode("utf-8")) > WPA_MAX_SSID_BYTES:
        raise InvalidOptions("wpa-pmkid", "salt", f"an SSID is at most {WPA_MAX_SSID_BYTES} bytes")


def descriptors() -> List[AlgorithmDescriptor]:
    return [
        AlgorithmDescriptor(
            id="netntlmv2",
            name="NetNTLMv2",
            category="special",
            compute=netntlmv2_hash,
            validate=validate_netntlmv2,
            supports_salt=True,
        ),
        AlgorithmDescriptor(
            id="wpa-pmkid",
            name="WPA-PMKID",
            category="special",
            compute=wpa_pmkid_hash,
            validate=validate_wpa_pmkid,
            supports_salt=True,
        ),
    ]
