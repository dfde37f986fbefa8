"""
Hashing Utilities — SHA-256 payload digests for the payment audit trail.
"""
import hashlib
import json


def payload_digest(data: dict) -> str:
    """SHA-256 of a dictionary in canonical form (sorted keys, Decimals as strings)."""
    canonical = json.dumps(data, sort_keys=True, default=str, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(canonical).hexdigest()


def chain_digest(data: dict, previous_hash: str = "") -> str:
    """SHA-256(previous_hash + payload_digest) linking an entry to its predecessor."""
    return hashlib.sha256(f"{previous_hash}{payload_digest(data)}".encode("utf-8")).hexdigest()
