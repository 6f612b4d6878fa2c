"""Relay-state integrity and freshness checks.

The relay state is an opaque token carried next to a SAML message. It is
protected with HMAC-SHA1 under a random SecretKey owned by the caller, and
accepted records are filtered down to those still inside a replay window.
Storage and pruning of records are the caller's responsibility.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from ..models.saml import RelayRecord, SecretKey

logger = logging.getLogger(__name__)

DEFAULT_KEY_SIZE = 20
DEFAULT_WINDOW = timedelta(minutes=5)
HMAC_ALGORITHM = "HmacSHA1"


def new_secret_key(size: int = DEFAULT_KEY_SIZE) -> SecretKey:
    """Generate a fresh random key for HMAC-SHA1 relay-state signatures.

    Args:
        size: Key length in bytes

    Returns:
        New SecretKey from the operating system CSPRNG
    """
    if size < 1:
        raise ValueError(f"Secret key size must be positive, got {size}")
    return SecretKey(material=secrets.token_bytes(size), algorithm=HMAC_ALGORITHM)


def sign(secret_key: SecretKey, value: str) -> str:
    """Compute the HMAC-SHA1 of the UTF-8 bytes of value.

    Returns:
        Lowercase hex digest, 40 characters

    Example:
        >>> key = new_secret_key()
        >>> len(sign(key, "/dashboard"))
        40
    """
    return hmac.new(secret_key.material, value.encode("utf-8"), hashlib.sha1).hexdigest()


def verify(secret_key: SecretKey, value: str, digest: str) -> bool:
    """Check a hex digest against value in constant time.

    Either hex case is accepted.
    """
    expected = sign(secret_key, value)
    return hmac.compare_digest(expected.encode("ascii"), digest.lower().encode("utf-8"))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are read as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_fresh(
    timestamp: datetime,
    window: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """Return True iff timestamp is strictly after now - window.

    A record exactly window old is stale. Naive datetimes, for either
    argument, are taken to be UTC.
    """
    if now is None:
        now = _now()
    return _as_utc(timestamp) > _as_utc(now) - window


def make_timeout_filter(
    window: timedelta,
    now: Optional[datetime] = None,
) -> Callable[[Tuple[str, datetime]], bool]:
    """Create a predicate keeping (value, timestamp) pairs inside the window.

    The reference instant is fixed when the predicate is created, so one
    filtering pass uses a single cut-off.

    Example:
        >>> fresh = list(filter(make_timeout_filter(timedelta(minutes=5)), pairs))
    """
    cutoff_now = now if now is not None else _now()

    def keep(item: Tuple[str, datetime]) -> bool:
        return is_fresh(item[1], window, cutoff_now)

    return keep


def prune_expired(
    records: Iterable[RelayRecord],
    window: timedelta,
    now: Optional[datetime] = None,
) -> List[RelayRecord]:
    """Return the records still inside the replay window."""
    keep = make_timeout_filter(window, now)
    fresh = [record for record in records if keep((record.value, record.issued_at))]
    logger.debug(f"Relay-state records kept after pruning: {len(fresh)}")
    return fresh


class RelayStateGuard:
    """Sign and check relay-state tokens with one secret key and window.

    The secret key is immutable, so a guard can be shared read-only across
    threads. Each server instance or session owns its own guard.

    Attributes:
        secret_key: HMAC key
        window: Replay window

    Example:
        >>> guard = RelayStateGuard(new_secret_key(), timedelta(minutes=5))
        >>> digest, record = guard.issue("/dashboard")
        >>> guard.check("/dashboard", digest, record)
        True
    """

    def __init__(self, secret_key: SecretKey, window: timedelta = DEFAULT_WINDOW) -> None:
        if window <= timedelta(0):
            raise ValueError(f"Relay-state window must be positive, got {window}")
        self.secret_key = secret_key
        self.window = window

    def issue(self, value: str, now: Optional[datetime] = None) -> Tuple[str, RelayRecord]:
        """Sign value and stamp a record for it.

        Returns:
            Tuple of (hex digest, RelayRecord)
        """
        issued_at = now if now is not None else _now()
        return sign(self.secret_key, value), RelayRecord(value=value, issued_at=issued_at)

    def check(
        self,
        value: str,
        digest: str,
        record: RelayRecord,
        now: Optional[datetime] = None,
    ) -> bool:
        """Accept value only if its HMAC matches and its record is fresh."""
        if record.value != value:
            logger.warning("Relay state does not match its stored record")
            return False

        if not verify(self.secret_key, value, digest):
            logger.warning("Relay state HMAC verification failed")
            return False

        if not is_fresh(record.issued_at, self.window, now):
            logger.warning(
                f"Relay state expired: issued {record.issued_at.isoformat()}, "
                f"window {self.window.total_seconds():.0f}s"
            )
            return False

        return True

    def prune(self, records: Iterable[RelayRecord], now: Optional[datetime] = None) -> List[RelayRecord]:
        """Return the records still inside this guard's window."""
        return prune_expired(records, self.window, now)
