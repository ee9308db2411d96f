"""Structural address classification — no network lookups."""

import re

from contract_scanner.models import Network
from contract_scanner.parsers.exceptions import InvalidFormatError, UnsupportedNetworkError

EVM_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
# base58 alphabet: no 0, O, I, l
SOLANA_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

SUPPORTED_NETWORKS = frozenset({Network.ETHEREUM})


def classify(address: str) -> Network:
    """Tag an address string with its network family.

    EVM is checked first; a string matching neither pattern is Network.INVALID.
    """
    if not isinstance(address, str):
        return Network.INVALID
    candidate = address.strip()
    if EVM_PATTERN.match(candidate):
        return Network.ETHEREUM
    if SOLANA_PATTERN.match(candidate):
        return Network.SOLANA
    return Network.INVALID


def require_supported(address: str) -> Network:
    """Classify and reject anything the engine cannot analyze."""
    network = classify(address)
    if network is Network.INVALID:
        raise InvalidFormatError(f"Invalid contract address format: {address!r}")
    if network not in SUPPORTED_NETWORKS:
        raise UnsupportedNetworkError(f"{network.value} analysis is not supported yet")
    return network
