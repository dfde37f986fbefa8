from careernest.utils.hashing import payload_digest, chain_digest
from careernest.utils.validators import validate_msisdn, validate_amount, normalize_msisdn, to_money
from careernest.utils.dates import month_windows, utcnow

__all__ = [
    "payload_digest", "chain_digest",
    "validate_msisdn", "validate_amount", "normalize_msisdn", "to_money",
    "month_windows", "utcnow",
]
