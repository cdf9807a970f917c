"""
pwservice.hashing
One-way salted Argon2id hashes for anything password-shaped that gets persisted.
"""

from typing import Any, Dict, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Default params (tunable through config). Balance security/performance.
DEFAULT_HASH_PARAMS = {
    "time_cost": 3,
    "memory_cost_kb": 65536,  # 64 MB
    "parallelism": 2,
}


def make_hasher(params: Optional[Dict[str, int]] = None) -> PasswordHasher:
    p = dict(DEFAULT_HASH_PARAMS)
    p.update(params or {})
    return PasswordHasher(
        time_cost=int(p["time_cost"]),
        memory_cost=int(p["memory_cost_kb"]),
        parallelism=int(p["parallelism"]),
    )


def hasher_from_config(cfg: Dict[str, Any]) -> PasswordHasher:
    return make_hasher({
        "time_cost": cfg.get("hash_time_cost", DEFAULT_HASH_PARAMS["time_cost"]),
        "memory_cost_kb": cfg.get("hash_memory_cost_kb", DEFAULT_HASH_PARAMS["memory_cost_kb"]),
        "parallelism": cfg.get("hash_parallelism", DEFAULT_HASH_PARAMS["parallelism"]),
    })


def hash_password(hasher: PasswordHasher, password: str) -> str:
    """Return an encoded argon2id hash; a fresh random salt is used per call."""
    return hasher.hash(password)


def verify_password(hasher: PasswordHasher, encoded: str, password: str) -> bool:
    try:
        return hasher.verify(encoded, password)
    except (VerificationError, InvalidHashError):
        return False
