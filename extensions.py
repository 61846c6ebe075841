from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(
    # The default key is the IP address of the user making the request.
    key_func=get_remote_address,
    # Storage comes from RATELIMIT_STORAGE_URI in the app config.
    default_limits=["1000 per day", "300 per hour"]
)
